import pytest

from dots.game_logic.board import EMPTY, Board, Empty, Point, Territory, from_key, to_key


def test_missing_cell_reads_as_empty():
    board = Board()
    assert board.get(3, 4) == EMPTY
    assert board.get(-1, 100) == EMPTY


@pytest.mark.parametrize("x,y", [(0, 0), (7, 3), (-2, 5), (-10, -20)])
def test_key_codec_round_trip(x, y):
    assert from_key(to_key(x, y)) == (x, y)


@pytest.mark.parametrize("key", ["", "1", "1,2,3", "a,b", "1.5,2", "1,", None, 12])
def test_malformed_keys_decode_to_none(key):
    assert from_key(key) is None


def test_setting_empty_on_absent_cell_returns_same_board():
    board = Board().set(1, 1, Point(owner=1))
    assert board.set(2, 2, EMPTY) is board


def test_setting_same_value_returns_same_board():
    board = Board().set(1, 1, Territory(owner=2))
    assert board.set(1, 1, Territory(owner=2)) is board


def test_set_is_copy_on_write():
    board = Board()
    nxt = board.set(1, 2, Point(owner=1))
    assert nxt is not board
    assert board.get(1, 2) == EMPTY
    assert nxt.get(1, 2) == Point(owner=1)


def test_set_empty_removes_key():
    board = Board().set(1, 2, Point(owner=1))
    cleared = board.set(1, 2, Empty())
    assert len(cleared) == 0
    assert cleared.get(1, 2) == EMPTY


def test_set_many_empty_batch_is_noop():
    board = Board().set(0, 0, Point(owner=1))
    assert board.set_many([]) is board


def test_set_many_last_write_wins():
    board = Board().set_many([
        (1, 1, Point(owner=1)),
        (2, 2, Territory(owner=1)),
        (1, 1, Territory(owner=2)),
        (2, 2, EMPTY),
    ])
    assert board.get(1, 1) == Territory(owner=2)
    assert board.get(2, 2) == EMPTY
    assert list(board.keys()) == ["1,1"]


def test_constructor_never_stores_empty():
    board = Board({"0,0": EMPTY, "1,0": Point(owner=2)})
    assert len(board) == 1


def test_cells_skips_undecodable_keys():
    board = Board({"bogus": Point(owner=1), "1,2": Point(owner=2)})
    assert list(board.cells()) == [((1, 2), Point(owner=2))]


def test_active_points_excludes_captured():
    board = Board().set_many([
        (0, 0, Point(owner=1)),
        (1, 0, Point(owner=1, captured=True, captured_by=2)),
        (2, 0, Point(owner=2)),
    ])
    assert board.active_points() == [(0, 0), (2, 0)]
    assert board.active_points(1) == [(0, 0)]
