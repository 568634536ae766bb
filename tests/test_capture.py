import pytest

from dots.game_logic.board import EMPTY, Point, Territory
from dots.game_logic.capture import CaptureIndex, compute_captures_after_move
from dots.game_logic.rules import get_legal_moves, place_point
from dots.game_logic.simulate import get_potential_capture, immediate_captures

# Player 1 walls around (2, 1) and (2, 2) on a 5x5 board
RING = [(2, 0), (1, 1), (3, 1), (1, 2), (3, 2), (1, 3), (2, 3), (3, 3)]


def test_no_opponent_points_is_a_noop(make_state):
    state = make_state(current_player=2)
    board, delta = compute_captures_after_move(state)
    assert delta == 0
    assert board is state.board


def test_region_touching_edge_is_not_captured(make_state, points_board):
    state = make_state(board=points_board({2: [(0, 0)], 1: [(1, 0)]}), current_player=2)
    board, delta = compute_captures_after_move(state)
    assert delta == 0
    assert board is state.board
    assert board.get(0, 0) == Point(owner=2)


def test_captures_enclosed_point_and_claims_territory(make_state, points_board):
    state = make_state(board=points_board({1: RING, 2: [(2, 1)]}), current_player=2)
    board, delta = compute_captures_after_move(state)
    assert delta == 1
    assert board.get(2, 1) == Point(owner=2, captured=True, captured_by=1)
    assert board.get(2, 2) == Territory(owner=1)
    # untouched outside the ring
    assert board.get(0, 0) == EMPTY


def test_full_block_around_single_point(make_state, points_board):
    block = [(x, y) for x in range(1, 4) for y in range(1, 4) if (x, y) != (2, 2)]
    state = make_state(board=points_board({1: block, 2: [(2, 2)]}), current_player=2)
    board, delta = compute_captures_after_move(state)
    assert delta == 1
    assert board.get(2, 2) == Point(owner=2, captured=True, captured_by=1)


def test_counts_every_point_in_region(make_state, points_board):
    walls = [(1, 2), (2, 2), (1, 0), (2, 0), (0, 1), (3, 1), (0, 2), (3, 2)]
    state = make_state(board=points_board({1: walls, 2: [(1, 1), (2, 1)]}), current_player=2)
    _, delta = compute_captures_after_move(state)
    assert delta == 2


def test_disjoint_regions_captured_in_one_call(make_state, points_board):
    walls = [(1, 1), (1, 3), (0, 2), (2, 2), (4, 1), (4, 3), (3, 2), (5, 2)]
    state = make_state(width=7, board=points_board({1: walls, 2: [(1, 2), (4, 2)]}), current_player=2)
    board, delta = compute_captures_after_move(state)
    assert delta == 2
    assert board.get(1, 2).captured and board.get(4, 2).captured


def test_captured_points_are_not_walls(make_state, points_board):
    board = points_board({1: [(1, 1), (3, 1), (1, 2), (3, 2), (2, 3), (2, 0)], 2: [(2, 2)]})
    board = board.set(2, 1, Point(owner=1, captured=True, captured_by=2))
    state = make_state(board=board, current_player=2)
    after, delta = compute_captures_after_move(state)
    assert delta == 1
    assert after.get(2, 2).captured
    # the captured point is passable but keeps its state
    assert after.get(2, 1) == Point(owner=1, captured=True, captured_by=2)


def test_flood_escapes_through_captured_point(make_state, points_board):
    board = points_board({1: [(1, 1), (3, 1), (1, 2), (3, 2), (2, 3)], 2: [(2, 2)]})
    board = board.set(2, 1, Point(owner=1, captured=True, captured_by=2))
    state = make_state(board=board, current_player=2)
    after, delta = compute_captures_after_move(state)
    assert delta == 0
    assert after is state.board


def test_existing_territory_inside_region_is_kept(make_state, points_board):
    board = points_board({1: RING, 2: [(2, 1)]}).set(2, 2, Territory(owner=2))
    state = make_state(board=board, current_player=2)
    after, delta = compute_captures_after_move(state)
    assert delta == 1
    assert after.get(2, 2) == Territory(owner=2)


def test_potential_capture_reports_cells_without_mutating(make_state, points_board):
    walls = [c for c in RING if c != (2, 3)]
    state = make_state(board=points_board({1: walls, 2: [(2, 1)]}), current_player=1)
    board_before = state.board

    result = get_potential_capture(state, 2, 3)

    assert result.territory == [(2, 2)]
    assert result.captured_points == [(2, 1)]
    assert state.board is board_before
    assert state.move_history == ()
    assert state.current_player == 1


def test_potential_capture_none_when_nothing_captured(make_state):
    assert get_potential_capture(make_state(), 2, 2) is None


def test_potential_capture_none_when_illegal(make_state, points_board):
    state = make_state(board=points_board({2: [(2, 2)]}))
    assert get_potential_capture(state, 2, 2) is None
    assert get_potential_capture(state, 9, 9) is None


def test_immediate_captures(make_state, points_board):
    walls = [c for c in RING if c != (2, 3)]
    state = make_state(board=points_board({1: walls, 2: [(2, 1)]}), current_player=1)
    assert immediate_captures(state, 2, 3) == 1
    assert immediate_captures(state, 0, 4) == 0


@pytest.mark.parametrize("points,to_move", [
    ({1: RING[:-2], 2: [(2, 1)]}, 1),
    ({1: RING, 2: [(2, 1)]}, 1),
    ({1: RING, 2: [(2, 1)]}, 2),
    ({1: [(1, 0), (0, 1), (2, 1), (3, 0), (4, 1)], 2: [(1, 1), (3, 1), (2, 2)]}, 1),
    ({2: [(1, 2), (2, 1), (3, 2), (2, 4), (0, 3)], 1: [(2, 2), (1, 3), (2, 3)]}, 2),
    ({1: [(0, 0), (4, 4)]}, 2),
    ({}, 1),
])
def test_capture_index_matches_simulation(make_state, points_board, points, to_move):
    state = make_state(board=points_board(points), current_player=to_move)
    index = CaptureIndex(state)
    for x, y in get_legal_moves(state):
        assert index.captures(x, y) == immediate_captures(state, x, y), (x, y)


def test_capture_index_counts_pieces_cut_off_by_one_move(make_state, points_board):
    # (2, 3) closes the ring; (0, 0) captures nothing
    state = make_state(board=points_board({1: RING[:6] + [(3, 3)], 2: [(2, 1), (2, 2)]}))
    index = CaptureIndex(state)
    assert index.captures(2, 3) == 2
    assert index.captures(0, 0) == 0
    assert index.best(get_legal_moves(state)) == (2, (2, 3))


def test_capture_index_on_captured_points_and_territory(make_state):
    state = make_state(current_player=1)
    for x, y in [(2, 0), (2, 1), (1, 1), (0, 4), (3, 1), (4, 4), (1, 2), (0, 3), (3, 2), (4, 3), (2, 3)]:
        state = place_point(state, x, y)
    index = CaptureIndex(state)
    for x, y in get_legal_moves(state):
        assert index.captures(x, y) == immediate_captures(state, x, y)
