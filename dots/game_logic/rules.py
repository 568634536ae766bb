import logging
from dataclasses import replace
from typing import Iterable, List, NamedTuple, Tuple

from dots.errors import IllegalMoveError, InvalidHistoryError
from dots.game_logic.board import Empty, Point, Territory
from dots.game_logic.capture import compute_captures_after_move
from dots.game_logic.state import (
    GameSettings,
    GameState,
    GameStatus,
    Move,
    Winner,
    new_game,
    other_player,
)

logger = logging.getLogger(__name__)


class EndConditions(NamedTuple):
    finished: bool
    winner: Winner


def is_move_legal(state: GameState, x: int, y: int) -> bool:
    """Empty cells and own territory are playable; points (even captured) and enemy territory are not."""
    if state.status != GameStatus.PLAYING:
        return False
    if not state.settings.in_bounds(x, y):
        return False
    cell = state.board.get(x, y)
    if isinstance(cell, Point):
        return False
    if isinstance(cell, Territory) and cell.owner != state.current_player:
        return False
    return True


def apply_move(state: GameState, x: int, y: int) -> GameState:
    """
    Place a point for the current player, log it, toggle the turn, then
    resolve captures and credit them to the player who just moved.
    Only call with a move that is_move_legal accepts.
    """
    if not is_move_legal(state, x, y):
        raise IllegalMoveError("Illegal move", x=x, y=y, player=state.current_player)

    player = state.current_player
    placed = replace(
        state,
        board=state.board.set(x, y, Point(owner=player)),
        current_player=other_player(player),
        move_history=state.move_history + (Move(x, y, player),),
    )
    board, score_delta = compute_captures_after_move(placed)
    score = dict(state.score)
    score[player] = score.get(player, 0) + score_delta
    return replace(placed, board=board, score=score)


def get_legal_moves(state: GameState) -> List[Tuple[int, int]]:
    if state.status != GameStatus.PLAYING:
        return []
    width, height = state.settings.width, state.settings.height
    return [(x, y) for y in range(height) for x in range(width) if is_move_legal(state, x, y)]


def get_empty_legal_moves(state: GameState) -> List[Tuple[int, int]]:
    """Legal moves on empty cells only, so the bot does not fill its own territory."""
    return [(x, y) for x, y in get_legal_moves(state) if isinstance(state.board.get(x, y), Empty)]


def end_conditions(state: GameState) -> EndConditions:
    """The player to move loses when no cell is legal for them."""
    if state.status != GameStatus.PLAYING:
        return EndConditions(state.status == GameStatus.FINISHED, state.winner)
    width, height = state.settings.width, state.settings.height
    for y in range(height):
        for x in range(width):
            if is_move_legal(state, x, y):
                return EndConditions(False, None)
    return EndConditions(True, state.opponent)


# --- VÒNG ĐỜI TRẬN ĐẤU ---
def finish(state: GameState, winner: Winner = None) -> GameState:
    return replace(state, status=GameStatus.FINISHED, winner=winner)


def place_point(state: GameState, x: int, y: int) -> GameState:
    """Transactional move: illegal requests leave the state as is, a move that ends the game freezes it."""
    if not is_move_legal(state, x, y):
        return state
    next_state = apply_move(state, x, y)
    end = end_conditions(next_state)
    if end.finished:
        logger.info("Game over after %d moves, winner=%s, score=%s",
                    len(next_state.move_history), end.winner, next_state.score)
        return finish(next_state, end.winner)
    return next_state


def surrender(state: GameState) -> GameState:
    if state.status != GameStatus.PLAYING:
        return state
    return finish(state, state.opponent)


def restart(state: GameState) -> GameState:
    return new_game(state.settings)


def replay(settings: GameSettings, history: Iterable) -> GameState:
    """Rebuild a state from a move log of Move tuples or {x, y, player} dicts."""
    state = new_game(settings)
    for index, entry in enumerate(history):
        if isinstance(entry, dict):
            entry = Move(entry["x"], entry["y"], entry["player"])
        x, y, player = entry
        if player != state.current_player:
            raise InvalidHistoryError("Out of turn move in history", index=index, player=player)
        if not is_move_legal(state, x, y):
            raise InvalidHistoryError("Illegal move in history", index=index, x=x, y=y)
        state = place_point(state, x, y)
    return state
