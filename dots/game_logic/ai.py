import logging
import math
import random
import time
from dataclasses import replace
from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence, Tuple

from dots.game_logic.board import Empty, Territory
from dots.game_logic.capture import CaptureIndex
from dots.game_logic.rules import get_empty_legal_moves, get_legal_moves
from dots.game_logic.simulate import immediate_captures, simulate_move
from dots.game_logic.state import GameState
from dots.game_logic.weights import FEATURE_COUNT, load_weights

logger = logging.getLogger(__name__)

BOT_DIFFICULTIES = ("neuro",)
DEFAULT_DIFFICULTY = "neuro"

NEAR_OPPONENT_RADIUS = 2
# Composite offensive score: captures dominate, then distance, then the linear model
CAPTURE_SCALE = 1_000_000
DISTANCE_SCALE = 1_000

MASK32 = 0xFFFFFFFF


class BotMove(NamedTuple):
    x: int
    y: int


class Candidate(NamedTuple):
    x: int
    y: int
    captures: int
    distance: int
    score: float
    offensive: float


def chebyshev(ax, ay, bx, by):
    return max(abs(ax - bx), abs(ay - by))


def dot(weights: Sequence[float], features: Sequence[float]) -> float:
    return sum(w * f for w, f in zip(weights, features))


def softmax(scores: Sequence[float]) -> List[float]:
    if not scores:
        return []
    top = max(scores)
    exp = [math.exp(s - top) for s in scores]
    total = sum(exp)
    return [e / total for e in exp]


def move_features(state: GameState, x: int, y: int, opponent_points, captures=None) -> List[float]:
    """[bias, is_empty, is_own_territory, would_capture, near_opponent]"""
    cell = state.board.get(x, y)
    is_empty = 1 if isinstance(cell, Empty) else 0
    is_own_territory = 1 if isinstance(cell, Territory) and cell.owner == state.current_player else 0
    if captures is None:
        captures = immediate_captures(state, x, y)
    near_opponent = 1 if any(chebyshev(x, y, px, py) <= NEAR_OPPONENT_RADIUS for px, py in opponent_points) else 0
    return [1, is_empty, is_own_territory, 1 if captures > 0 else 0, near_opponent]


def defense_probability(lost_next_turn: int, bot_best_capture_next_turn: int) -> float:
    if lost_next_turn <= 0:
        return 0.0
    if bot_best_capture_next_turn <= 0:
        return 1.0
    return lost_next_turn / (lost_next_turn + bot_best_capture_next_turn)


# --- SEED TẤT ĐỊNH ---
def _xorshift32(h):
    h ^= (h << 13) & MASK32
    h ^= h >> 17
    h ^= (h << 5) & MASK32
    return h & MASK32


def bot_seed(state: GameState) -> int:
    """Hash of move count, scores and the whole move history. Same state, same seed."""
    h = (len(state.move_history) * 0x9E3779B1) & MASK32
    h ^= (state.score.get(1, 0) * 0x85EBCA6B + state.score.get(2, 0) * 0xC2B2AE35) & MASK32
    for x, y, player in state.move_history:
        h ^= (x * 73856093) ^ (y * 19349663) ^ (player * 83492791)
        h = _xorshift32(h & MASK32)
    return h or 0x6D2B79F5


def decision_draw(state: GameState) -> float:
    """Pseudo-random value in [0, 1) derived only from the state."""
    return random.Random(bot_seed(state)).random()


@lru_cache(maxsize=1)
def runtime_weights() -> Tuple[float, ...]:
    return tuple(load_weights())


class NeuroBot:
    def __init__(self, width, height, difficulty=None, weights=None):
        self.width = width
        self.height = height
        level = difficulty.lower() if difficulty else DEFAULT_DIFFICULTY
        if level not in BOT_DIFFICULTIES:
            logger.debug("Unknown bot difficulty %r, using %s", difficulty, DEFAULT_DIFFICULTY)
            level = DEFAULT_DIFFICULTY
        self.level = level
        self.weights = list(weights) if weights is not None else list(runtime_weights())

        # Smaller boards search harder
        cells = width * height
        if cells <= 100:
            self.top_k = 60
            self.radius = 6
            self.time_limit_ms = 120
        elif cells <= 200:
            self.top_k = 40
            self.radius = 2
            self.time_limit_ms = 80
        else:
            self.top_k = 20
            self.radius = 2
            self.time_limit_ms = 50

        self.no_opponent_distance = max(width, height)
        self.deadline = 0.0

    def _out_of_time(self):
        return time.monotonic() >= self.deadline

    def relevant_cells(self, state: GameState):
        """Cells within the pruning radius of any active point, or None on a board with no active point."""
        active = state.board.active_points()
        if not active:
            return None
        r = self.radius
        cells = set()
        for px, py in active:
            for y in range(max(0, py - r), min(self.height, py + r + 1)):
                for x in range(max(0, px - r), min(self.width, px + r + 1)):
                    cells.add((x, y))
        return cells

    def prune(self, state: GameState, moves):
        relevant = self.relevant_cells(state)
        if relevant is None:
            return moves
        near = [m for m in moves if m in relevant]
        return near or moves

    def rank_candidates(self, state: GameState, moves) -> List[Candidate]:
        index = CaptureIndex(state)
        opponent_points = state.board.active_points(state.opponent)
        ranked = []
        for x, y in moves:
            captures = index.captures(x, y)
            distance = min((chebyshev(x, y, px, py) for px, py in opponent_points),
                           default=self.no_opponent_distance)
            score = dot(self.weights, move_features(state, x, y, opponent_points, captures))
            offensive = captures * CAPTURE_SCALE - distance * DISTANCE_SCALE + score
            ranked.append(Candidate(x, y, captures, distance, score, offensive))
        ranked.sort(key=lambda c: c.offensive, reverse=True)
        return ranked

    def best_capture(self, state: GameState):
        """(captures, move) for the best immediate capture of the player to move."""
        return CaptureIndex(state).best(self.prune(state, get_legal_moves(state)))

    def lookahead(self, state: GameState, shortlist):
        """
        For each candidate: bot move, then the opponent's best capturing reply,
        then the bot's best capture after that. Returns ([(candidate, reply_captures)],
        best bot capture seen). Candidates left when the deadline passes are
        skipped, never scored.
        """
        bot = state.current_player
        replies = []
        bot_best = 0
        for cand in shortlist:
            if self._out_of_time():
                break
            after_bot = simulate_move(state, cand.x, cand.y)
            reply_captures, reply = self.best_capture(after_bot)
            if reply is not None:
                after_reply = simulate_move(after_bot, *reply)
            else:
                after_reply = replace(after_bot, current_player=bot)
            own, _ = self.best_capture(after_reply)
            replies.append((cand, reply_captures))
            bot_best = max(bot_best, own)
        return replies, bot_best

    def get_best_move(self, state: GameState, time_budget_ms=None) -> Optional[Tuple[int, int]]:
        moves = get_empty_legal_moves(state) or get_legal_moves(state)
        if not moves:
            return None
        if len(self.weights) != FEATURE_COUNT:
            logger.warning("Bot weights have %d entries, expected %d; playing first candidate",
                           len(self.weights), FEATURE_COUNT)
            return moves[0]

        budget = self.time_limit_ms if time_budget_ms is None else max(0, time_budget_ms)
        self.deadline = time.monotonic() + budget / 1000.0

        # Threats over every opponent move, not only the pruned ones
        as_opponent = replace(state, current_player=state.opponent)
        threats = CaptureIndex(as_opponent)
        opponent_moves = get_legal_moves(as_opponent)
        lost_next_turn, _ = threats.best(opponent_moves)

        ranked = self.rank_candidates(state, self.prune(state, moves))
        shortlist = ranked[:self.top_k]
        best = shortlist[0]

        if lost_next_turn == 0:
            self._log_choice(state, shortlist, best, "offense", 0.0)
            return best.x, best.y

        # Blocking the opponent's capturing cells is looked at first
        threatened = {m for m in opponent_moves if threats.captures(*m) > 0}
        order = sorted(shortlist, key=lambda c: (c.x, c.y) not in threatened)
        replies, bot_best_next = self.lookahead(state, order)
        p_defend = defense_probability(lost_next_turn, bot_best_next)
        choice, mode = best, "offense"
        if replies and decision_draw(state) < p_defend:
            choice = min(replies, key=lambda r: (r[1], -r[0].captures, r[0].distance, -r[0].score))[0]
            mode = "defense"
        self._log_choice(state, shortlist, choice, mode, p_defend)
        return choice.x, choice.y

    def _log_choice(self, state, shortlist, choice, mode, p_defend):
        if not logger.isEnabledFor(logging.DEBUG):
            return
        probs = softmax([c.score for c in shortlist])
        p_choice = next((p for c, p in zip(shortlist, probs) if c is choice), 0.0)
        logger.debug("Bot %s %dx%d: %s (%d, %d) captures=%d p_defend=%.2f policy=%.3f candidates=%d",
                     self.level, self.width, self.height, mode, choice.x, choice.y,
                     choice.captures, p_defend, p_choice, len(shortlist))


def choose_move(state: GameState, difficulty=None, time_budget_ms=None, weights=None) -> Optional[Tuple[int, int]]:
    bot = NeuroBot(state.settings.width, state.settings.height, difficulty, weights)
    return bot.get_best_move(state, time_budget_ms)


def get_bot_move(state: GameState, difficulty=None, time_budget_ms=None) -> Optional[BotMove]:
    """The bot's move for the player to move, or None only when no legal move exists."""
    move = choose_move(state, difficulty, time_budget_ms)
    return BotMove(*move) if move else None
