from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

# --- HẰNG SỐ ---
PLAYER_1 = 1
PLAYER_2 = 2


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Point:
    """A placed point. Captured points stay on the board for good."""
    owner: int
    captured: bool = False
    captured_by: Optional[int] = None


@dataclass(frozen=True)
class Territory:
    owner: int


EMPTY = Empty()

CellState = Union[Empty, Point, Territory]
Coord = Tuple[int, int]
CellUpdate = Tuple[int, int, CellState]


def is_active_point(cell, owner=None):
    """Point that has not been captured, optionally owned by `owner`."""
    if not isinstance(cell, Point) or cell.captured:
        return False
    return owner is None or cell.owner == owner


# --- KEY CODEC ---
def to_key(x: int, y: int) -> str:
    return f"{x},{y}"


def from_key(key) -> Optional[Coord]:
    """Parse "x,y" back into (x, y). Malformed keys give None instead of raising."""
    if not isinstance(key, str):
        return None
    parts = key.split(",")
    if len(parts) != 2:
        return None
    try:
        x, y = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return x, y


class Board:
    """
    Sparse immutable map from coordinate to cell state.
    A missing key means Empty; Empty is never stored.
    Every update returns a new Board (or the same one when nothing changes).
    """
    __slots__ = ("_cells",)

    def __init__(self, cells=None):
        self._cells = {}
        if cells:
            for key, state in dict(cells).items():
                if not isinstance(state, Empty):
                    self._cells[key] = state

    @classmethod
    def _wrap(cls, cells):
        board = cls.__new__(cls)
        board._cells = cells
        return board

    def __len__(self):
        return len(self._cells)

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    __hash__ = None

    def __repr__(self):
        return f"Board({len(self._cells)} cells)"

    def get(self, x: int, y: int) -> CellState:
        # No bounds check: out of range reads as empty
        return self._cells.get(to_key(x, y), EMPTY)

    def set(self, x: int, y: int, state: CellState) -> "Board":
        key = to_key(x, y)
        if isinstance(state, Empty):
            if key not in self._cells:
                return self
            cells = dict(self._cells)
            del cells[key]
            return Board._wrap(cells)
        if self._cells.get(key) == state:
            return self
        cells = dict(self._cells)
        cells[key] = state
        return Board._wrap(cells)

    def set_many(self, updates: Iterable[CellUpdate]) -> "Board":
        """Apply (x, y, state) updates in order; later writes win."""
        updates = list(updates)
        if not updates:
            return self
        cells = dict(self._cells)
        for x, y, state in updates:
            key = to_key(x, y)
            if isinstance(state, Empty):
                cells.pop(key, None)
            else:
                cells[key] = state
        return Board._wrap(cells)

    def keys(self):
        return self._cells.keys()

    def cells(self) -> Iterator[Tuple[Coord, CellState]]:
        """Yield ((x, y), state) for every stored cell, skipping undecodable keys."""
        for key, state in self._cells.items():
            coord = from_key(key)
            if coord is None:
                continue
            yield coord, state

    def active_points(self, owner=None):
        return [coord for coord, cell in self.cells() if is_active_point(cell, owner)]


EMPTY_BOARD = Board()
