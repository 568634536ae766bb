import datetime
import json
import logging

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from dots import config
from dots.game_logic.state import GameSettings, GameState

logger = logging.getLogger(__name__)


def _engine_kwargs(url):
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory SQLite must share one connection or every session sees an empty DB
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(config.DATABASE_URL, **_engine_kwargs(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class Match(Base):
    __tablename__ = "matches"
    id = Column(String(64), primary_key=True, index=True)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    mode = Column(String(8), nullable=False)
    bot_difficulty = Column(String(32), nullable=True)

    winner = Column(String(8), nullable=True)  # "1", "2", "draw" hoặc NULL
    score_1 = Column(Integer, default=0)
    score_2 = Column(Integer, default=0)
    move_count = Column(Integer, default=0)
    move_history = Column(Text, nullable=False, default="[]")

    created_at = Column(DateTime, default=lambda: datetime.datetime.now(datetime.timezone.utc))

    def history(self):
        return json.loads(self.move_history or "[]")

    def settings(self) -> GameSettings:
        return GameSettings(width=self.width, height=self.height, mode=self.mode,
                            bot_difficulty=self.bot_difficulty)


def create_tables():
    Base.metadata.create_all(bind=engine)


def record_match(db, gid: str, state: GameState) -> Match:
    """Upsert a finished game into the archive."""
    match = db.get(Match, gid)
    if match is None:
        match = Match(id=gid)
        db.add(match)
    s = state.settings
    match.width = s.width
    match.height = s.height
    match.mode = s.mode.value
    match.bot_difficulty = s.bot_difficulty
    match.winner = None if state.winner is None else str(state.winner)
    match.score_1 = state.score.get(1, 0)
    match.score_2 = state.score.get(2, 0)
    match.move_count = len(state.move_history)
    match.move_history = json.dumps([m._asdict() for m in state.move_history])
    db.commit()
    logger.info("Archived match %s (winner=%s, %d moves)", gid, match.winner, match.move_count)
    return match
