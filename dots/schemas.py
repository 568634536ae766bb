from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from dots.game_logic.board import Point, Territory
from dots.game_logic.state import GameMode, GameState, GameStatus


# --- REQUESTS ---
class NewGameReq(BaseModel):
    width: int = Field(9, ge=1, le=100)
    height: int = Field(9, ge=1, le=100)
    mode: GameMode = GameMode.PVP
    bot_difficulty: Optional[str] = None
    player_colors: Optional[Dict[int, str]] = None


class MoveReq(BaseModel):
    x: int
    y: int


class AIMoveReq(BaseModel):
    difficulty: Optional[str] = None
    time_budget_ms: Optional[int] = Field(None, ge=0, le=10_000)


# --- RESPONSES ---
class Coord(BaseModel):
    x: int
    y: int


class CellOut(BaseModel):
    x: int
    y: int
    type: str
    owner: int
    captured: bool = False
    captured_by: Optional[int] = None


class MoveOut(BaseModel):
    x: int
    y: int
    player: int


class SettingsOut(BaseModel):
    width: int
    height: int
    mode: GameMode
    bot_difficulty: Optional[str] = None
    player_colors: Dict[int, str]


class StateOut(BaseModel):
    settings: SettingsOut
    board: List[CellOut]
    score: Dict[int, int]
    current_player: int
    status: GameStatus
    winner: Union[int, str, None] = None
    move_history: List[MoveOut]


class PotentialCaptureOut(BaseModel):
    territory: List[Coord]
    captured_points: List[Coord]


class MatchOut(BaseModel):
    id: str
    width: int
    height: int
    mode: str
    bot_difficulty: Optional[str] = None
    winner: Optional[str] = None
    score: Dict[int, int]
    move_count: int
    move_history: List[MoveOut]


def cell_out(x, y, cell) -> CellOut:
    if isinstance(cell, Point):
        return CellOut(x=x, y=y, type="point", owner=cell.owner,
                       captured=cell.captured, captured_by=cell.captured_by)
    if isinstance(cell, Territory):
        return CellOut(x=x, y=y, type="territory", owner=cell.owner)
    raise TypeError(f"Unexpected cell state {cell!r}")


def state_out(state: GameState) -> StateOut:
    s = state.settings
    return StateOut(
        settings=SettingsOut(width=s.width, height=s.height, mode=s.mode,
                             bot_difficulty=s.bot_difficulty, player_colors=dict(s.player_colors)),
        board=[cell_out(x, y, cell) for (x, y), cell in sorted(state.board.cells(), key=lambda c: (c[0][1], c[0][0]))],
        score=dict(state.score),
        current_player=state.current_player,
        status=state.status,
        winner=state.winner,
        move_history=[MoveOut(x=m.x, y=m.y, player=m.player) for m in state.move_history],
    )


def potential_out(result) -> Optional[PotentialCaptureOut]:
    if result is None:
        return None
    return PotentialCaptureOut(
        territory=[Coord(x=x, y=y) for x, y in result.territory],
        captured_points=[Coord(x=x, y=y) for x, y in result.captured_points],
    )
