"""Dry runs of a hypothetical move. Nothing here touches the caller's state."""
from typing import List, NamedTuple, Optional, Tuple

from dots.game_logic.board import Empty, Point, Territory
from dots.game_logic.rules import apply_move, is_move_legal
from dots.game_logic.state import GameState


class PotentialCapture(NamedTuple):
    territory: List[Tuple[int, int]]
    captured_points: List[Tuple[int, int]]


def simulate_move(state: GameState, x: int, y: int) -> GameState:
    """State after the current player plays (x, y); must be legal."""
    return apply_move(state, x, y)


def immediate_captures(state: GameState, x: int, y: int) -> int:
    """Points the current player would capture by playing (x, y)."""
    after = simulate_move(state, x, y)
    return after.score[state.current_player] - state.score[state.current_player]


def get_potential_capture(state: GameState, x: int, y: int) -> Optional[PotentialCapture]:
    """
    Cells that would turn into territory or captured points if the current
    player placed at (x, y). None when the move is illegal or captures nothing.
    """
    if not is_move_legal(state, x, y):
        return None
    after = simulate_move(state, x, y)
    if after.score[state.current_player] == state.score[state.current_player]:
        return None

    before = state.board
    territory = []
    captured_points = []
    for (cx, cy), cell in after.board.cells():
        prev = before.get(cx, cy)
        if isinstance(cell, Territory) and isinstance(prev, Empty):
            territory.append((cx, cy))
        elif isinstance(cell, Point) and cell.captured and isinstance(prev, Point) and not prev.captured:
            captured_points.append((cx, cy))
    return PotentialCapture(sorted(territory), sorted(captured_points))
