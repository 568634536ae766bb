import os
from pathlib import Path

# --- CẤU HÌNH ---
DATABASE_URL = os.getenv("DOTS_DATABASE_URL", "sqlite:///./dots.db")
CORS_ORIGINS = [o.strip() for o in os.getenv("DOTS_CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("DOTS_LOG_LEVEL", "INFO").upper()

DEFAULT_WEIGHTS_PATH = Path(__file__).resolve().parent / "game_logic" / "weights.json"
BOT_WEIGHTS_PATH = Path(os.getenv("DOTS_BOT_WEIGHTS", str(DEFAULT_WEIGHTS_PATH)))
