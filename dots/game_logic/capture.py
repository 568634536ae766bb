"""
Capture resolution after a placement.

Walls are the active points of the player who just moved. Captured points
are never walls, so a flood can pass through them. A flood seeded from an
active opponent point that never reaches the outer edge is enclosed: its
active opponent points become captured and its empty cells become territory
of the mover.
"""
from collections import deque
from typing import NamedTuple

from dots.game_logic.board import Board, Point, Territory, is_active_point
from dots.game_logic.state import other_player

ORTH = ((-1, 0), (1, 0), (0, -1), (0, 1))


class CaptureResult(NamedTuple):
    board: Board
    score_delta: int


def _flood_region(seed, width, height, is_wall):
    """BFS over non-wall cells from `seed`. Returns (visited, reached_edge)."""
    visited = {seed}
    queue = deque([seed])
    reached_edge = False
    while queue:
        x, y = queue.popleft()
        if x == 0 or y == 0 or x == width - 1 or y == height - 1:
            reached_edge = True
        for dx, dy in ORTH:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            if (nx, ny) in visited or is_wall((nx, ny)):
                continue
            visited.add((nx, ny))
            queue.append((nx, ny))
    return visited, reached_edge


def compute_captures_after_move(state) -> CaptureResult:
    """
    Resolve captures for a state whose new point is already placed and whose
    current_player has already been toggled. The capturing player is the one
    who just moved, i.e. the opponent of state.current_player.
    """
    settings = state.settings
    width, height = settings.width, settings.height
    capturing_player = other_player(state.current_player)
    opponent = state.current_player

    cells = {coord: cell for coord, cell in state.board.cells() if settings.in_bounds(*coord)}

    def is_wall(coord):
        return is_active_point(cells.get(coord), capturing_player)

    seeds = sorted(coord for coord, cell in cells.items() if is_active_point(cell, opponent))

    processed = set()
    to_capture = []
    to_territory = []
    for seed in seeds:
        if seed in processed:
            continue
        region, reached_edge = _flood_region(seed, width, height, is_wall)
        # One flood per connected component, open or not
        processed |= region
        if reached_edge:
            continue
        for coord in region:
            cell = cells.get(coord)
            if cell is None:
                to_territory.append(coord)
            elif is_active_point(cell, opponent):
                to_capture.append(coord)
            # Territory of either owner and captured points stay as they are

    if not to_capture and not to_territory:
        return CaptureResult(state.board, 0)

    updates = [
        (x, y, Point(owner=opponent, captured=True, captured_by=capturing_player))
        for x, y in to_capture
    ]
    updates += [(x, y, Territory(owner=capturing_player)) for x, y in to_territory]
    return CaptureResult(state.board.set_many(updates), len(to_capture))


class CaptureIndex:
    """
    Immediate capture counts for every move of the player to move, from one
    pass over the board.

    A new point only splits the component of non-wall cells it lands in.
    Components that already miss the edge keep their opponent points
    captured whatever the move, so they form a constant part of every count.
    Inside a component that reaches the edge, a move captures the pieces it
    cuts off from the edge. A depth-first search rooted on an edge cell finds
    those pieces from low-link values, as for articulation points.
    """

    def __init__(self, state):
        settings = state.settings
        self.width, self.height = settings.width, settings.height
        mover = state.current_player
        opponent = other_player(mover)
        cells = {coord: cell for coord, cell in state.board.cells() if settings.in_bounds(*coord)}
        self.walls = {coord for coord, cell in cells.items() if is_active_point(cell, mover)}
        self.targets = {coord for coord, cell in cells.items() if is_active_point(cell, opponent)}
        self.enclosed = 0
        self.cut = {}
        self._label()

    def _is_edge(self, coord):
        x, y = coord
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def _neighbors(self, coord):
        x, y = coord
        for dx, dy in ORTH:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height and (nx, ny) not in self.walls:
                yield nx, ny

    def _label(self):
        seen = set()
        everything = [(x, y) for y in range(self.height) for x in range(self.width)]
        for coord in everything:
            if self._is_edge(coord) and coord not in self.walls and coord not in seen:
                seen |= self._open_component(coord)
        for coord in everything:
            if coord in self.walls or coord in seen:
                continue
            region, _ = _flood_region(coord, self.width, self.height, lambda c: c in self.walls)
            seen |= region
            self.enclosed += len(region & self.targets)

    def _open_component(self, root):
        disc = {root: 0}
        low = {root: 0}
        reaches_edge = {root: True}
        targets = {root: int(root in self.targets)}
        stack = [(root, None, self._neighbors(root))]
        while stack:
            node, parent, pending = stack[-1]
            descended = False
            for nb in pending:
                if nb not in disc:
                    disc[nb] = low[nb] = len(disc)
                    reaches_edge[nb] = self._is_edge(nb)
                    targets[nb] = int(nb in self.targets)
                    stack.append((nb, node, self._neighbors(nb)))
                    descended = True
                    break
                if nb != parent:
                    low[node] = min(low[node], disc[nb])
            if descended:
                continue
            stack.pop()
            if parent is None:
                continue
            low[parent] = min(low[parent], low[node])
            reaches_edge[parent] = reaches_edge[parent] or reaches_edge[node]
            targets[parent] += targets[node]
            # The subtree of node hangs on parent alone
            if low[node] >= disc[parent] and not reaches_edge[node] and targets[node]:
                self.cut[parent] = self.cut.get(parent, 0) + targets[node]
        return set(disc)

    def captures(self, x, y) -> int:
        """Opponent points captured if the player to move plays (x, y). The move must be legal."""
        return self.enclosed + self.cut.get((x, y), 0)

    def best(self, moves):
        """(captures, move) of the first strongest capture among `moves`, or (0, None)."""
        best, best_move = 0, None
        for x, y in moves:
            n = self.captures(x, y)
            if n > best:
                best, best_move = n, (x, y)
        return best, best_move
