import logging
import uuid

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from dots import config
from dots.errors import GameNotFoundError, InvalidHistoryError
from dots.game_logic import rules
from dots.game_logic.ai import get_bot_move
from dots.game_logic.simulate import get_potential_capture
from dots.game_logic.state import GameSettings, GameState, GameStatus, new_game
from dots.models_db import Match, SessionLocal, create_tables, record_match
from dots.schemas import (
    AIMoveReq,
    MatchOut,
    MoveOut,
    MoveReq,
    NewGameReq,
    potential_out,
    state_out,
)

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Dots", description="Rules engine and bot for the dots territory game")
app.add_middleware(CORSMiddleware, allow_origins=config.CORS_ORIGINS, allow_credentials=True,
                   allow_methods=["*"], allow_headers=["*"])


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


games = {}  # gid -> GameState đang chơi


@app.on_event("startup")
def startup():
    create_tables()


@app.exception_handler(GameNotFoundError)
def game_not_found(request: Request, exc: GameNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message, "code": exc.code})


def _get_game(gid: str) -> GameState:
    if gid not in games:
        raise GameNotFoundError("Game not found", gid=gid)
    return games[gid]


def _store(gid: str, state: GameState, db: Session) -> GameState:
    prev = games.get(gid)
    games[gid] = state
    if state.status == GameStatus.FINISHED and (prev is None or prev.status != GameStatus.FINISHED):
        record_match(db, gid, state)
    return state


# --- GAME ---
@app.post("/game/new")
def new_game_route(req: NewGameReq):
    kwargs = {}
    if req.player_colors:
        kwargs["player_colors"] = req.player_colors
    settings = GameSettings(width=req.width, height=req.height, mode=req.mode,
                            bot_difficulty=req.bot_difficulty, **kwargs)
    gid = uuid.uuid4().hex
    games[gid] = new_game(settings)
    logger.info("New game %s: %dx%d %s", gid, settings.width, settings.height, settings.mode.value)
    return {"game_id": gid, "state": state_out(games[gid])}


@app.get("/game/{gid}")
def get_game(gid: str):
    return {"game_id": gid, "state": state_out(_get_game(gid))}


@app.get("/game/{gid}/legal")
def legal_moves(gid: str):
    state = _get_game(gid)
    return {"moves": [{"x": x, "y": y} for x, y in rules.get_legal_moves(state)]}


@app.get("/game/{gid}/potential")
def potential_capture(gid: str, x: int, y: int):
    state = _get_game(gid)
    return {"potential": potential_out(get_potential_capture(state, x, y))}


@app.post("/game/{gid}/move")
def move(gid: str, m: MoveReq, db: Session = Depends(get_db)):
    state = _get_game(gid)
    if not rules.is_move_legal(state, m.x, m.y):
        raise HTTPException(400, f"Illegal move ({m.x},{m.y}) for player {state.current_player}")
    state = _store(gid, rules.place_point(state, m.x, m.y), db)
    return {"msg": "OK", "state": state_out(state)}


@app.post("/game/{gid}/ai_move")
def ai_move(gid: str, req: AIMoveReq, db: Session = Depends(get_db)):
    state = _get_game(gid)
    if state.status != GameStatus.PLAYING:
        raise HTTPException(400, "Game is already finished")
    difficulty = req.difficulty or state.settings.bot_difficulty
    mv = get_bot_move(state, difficulty, req.time_budget_ms)
    if mv is None:
        end = rules.end_conditions(state)
        state = _store(gid, rules.finish(state, end.winner), db)
        return {"msg": "Bot has no move", "move": None, "state": state_out(state)}
    state = _store(gid, rules.place_point(state, mv.x, mv.y), db)
    return {"msg": "Bot move", "move": {"x": mv.x, "y": mv.y}, "state": state_out(state)}


@app.post("/game/{gid}/hint")
def get_hint(gid: str, req: AIMoveReq):
    state = _get_game(gid)
    mv = get_bot_move(state, req.difficulty, req.time_budget_ms)
    return {"move": {"x": mv.x, "y": mv.y} if mv else None}


@app.post("/game/{gid}/surrender")
def surrender(gid: str, db: Session = Depends(get_db)):
    state = _store(gid, rules.surrender(_get_game(gid)), db)
    return {"msg": "Surrendered", "state": state_out(state)}


@app.post("/game/{gid}/restart")
def restart(gid: str):
    games[gid] = rules.restart(_get_game(gid))
    return {"msg": "Restarted", "state": state_out(games[gid])}


# --- MATCH ARCHIVE ---
def _match_out(match: Match) -> MatchOut:
    return MatchOut(
        id=match.id, width=match.width, height=match.height, mode=match.mode,
        bot_difficulty=match.bot_difficulty, winner=match.winner,
        score={1: match.score_1, 2: match.score_2}, move_count=match.move_count,
        move_history=[MoveOut(**m) for m in match.history()],
    )


def _get_match(gid: str, db: Session) -> Match:
    match = db.get(Match, gid)
    if not match:
        raise HTTPException(404, "Match not found")
    return match


@app.get("/matches")
def list_matches(limit: int = 50, db: Session = Depends(get_db)):
    matches = db.query(Match).order_by(Match.created_at.desc()).limit(min(max(limit, 1), 200)).all()
    return [_match_out(m) for m in matches]


@app.get("/matches/{gid}")
def get_match(gid: str, db: Session = Depends(get_db)):
    return _match_out(_get_match(gid, db))


@app.get("/matches/{gid}/replay")
def replay_match(gid: str, db: Session = Depends(get_db)):
    match = _get_match(gid, db)
    try:
        state = rules.replay(match.settings(), match.history())
    except InvalidHistoryError as e:
        logger.warning("Cannot replay match %s: %s", gid, e)
        raise HTTPException(422, str(e))
    return {"game_id": gid, "state": state_out(state)}
