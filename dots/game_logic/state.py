from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, NamedTuple, Optional, Tuple, Union

from dots.game_logic.board import EMPTY_BOARD, PLAYER_1, PLAYER_2, Board

Winner = Union[int, str, None]
DRAW = "draw"


class GameMode(str, Enum):
    PVP = "PVP"
    PVC = "PVC"


class GameStatus(str, Enum):
    PLAYING = "playing"
    FINISHED = "finished"


class Move(NamedTuple):
    x: int
    y: int
    player: int


def other_player(player: int) -> int:
    return PLAYER_2 if player == PLAYER_1 else PLAYER_1


def _default_colors():
    return {PLAYER_1: "#000000", PLAYER_2: "#ffffff"}


@dataclass(frozen=True)
class GameSettings:
    width: int
    height: int
    mode: GameMode = GameMode.PVP
    bot_difficulty: Optional[str] = None
    # Cosmetic only, the rules never read it
    player_colors: Mapping[int, str] = field(default_factory=_default_colors, compare=False)

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Board must be at least 1x1, got {self.width}x{self.height}")
        object.__setattr__(self, "mode", GameMode(self.mode))

    @property
    def cells(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


@dataclass(frozen=True)
class GameState:
    """One immutable snapshot of a match. Transitions build a new one."""
    settings: GameSettings
    board: Board = field(default_factory=lambda: EMPTY_BOARD)
    score: Dict[int, int] = field(default_factory=lambda: {PLAYER_1: 0, PLAYER_2: 0})
    current_player: int = PLAYER_1
    status: GameStatus = GameStatus.PLAYING
    winner: Winner = None
    move_history: Tuple[Move, ...] = ()

    @property
    def opponent(self) -> int:
        return other_player(self.current_player)

    @property
    def is_playing(self) -> bool:
        return self.status == GameStatus.PLAYING


def new_game(settings: GameSettings) -> GameState:
    """Score 0:0, empty board, player 1 to move."""
    return GameState(settings=settings)
