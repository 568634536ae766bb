"""
Shared pytest fixtures.

The database URL is pointed at in-memory SQLite before any dots module is
imported, so the API tests never touch a file on disk.
"""
import os

os.environ["DOTS_DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402

from dots.game_logic.board import Board, Point  # noqa: E402
from dots.game_logic.state import GameMode, GameSettings, GameState  # noqa: E402


@pytest.fixture
def make_state():
    """Factory for GameState with a width x height board and optional overrides."""
    def _make(width=5, height=5, mode=GameMode.PVP, **overrides):
        settings = GameSettings(width=width, height=height, mode=mode)
        return GameState(settings=settings, **overrides)
    return _make


@pytest.fixture
def points_board():
    """Build a Board from {player: [(x, y), ...]} of active points."""
    def _build(points, board=None):
        board = board if board is not None else Board()
        updates = [(x, y, Point(owner=player)) for player, coords in points.items() for x, y in coords]
        return board.set_many(updates)
    return _build
