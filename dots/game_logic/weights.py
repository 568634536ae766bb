"""
Linear policy weights for the neuro bot.

The weights file is a JSON array of floats in feature order:
bias, is_empty, is_own_territory, would_capture, near_opponent.
An offline self-play trainer overwrites it; the service loads it at startup.
"""
import json
import logging
from pathlib import Path
from typing import List

from pydantic import TypeAdapter, ValidationError

from dots import config

logger = logging.getLogger(__name__)

FEATURE_NAMES = ("bias", "is_empty", "is_own_territory", "would_capture", "near_opponent")
FEATURE_COUNT = len(FEATURE_NAMES)

DEFAULT_WEIGHTS = [
    -1.0349984097443282e-14,
    0.4999999999999893,
    -0.3,
    6.659561092446511,
    5.693134758474719,
]

_weights_adapter = TypeAdapter(List[float])


def load_weights(path=None) -> List[float]:
    """
    Read a weights file. Unreadable or non-numeric files fall back to the
    defaults. A wrong length is passed through untouched; the bot copes with it.
    """
    path = Path(path) if path is not None else config.BOT_WEIGHTS_PATH
    try:
        weights = _weights_adapter.validate_json(path.read_bytes())
    except FileNotFoundError:
        logger.warning("Weights file %s not found, using defaults", path)
        return list(DEFAULT_WEIGHTS)
    except ValidationError as e:
        logger.warning("Weights file %s is invalid (%d errors), using defaults", path, e.error_count())
        return list(DEFAULT_WEIGHTS)

    if len(weights) != FEATURE_COUNT:
        logger.warning("Weights file %s has %d entries, expected %d", path, len(weights), FEATURE_COUNT)
    return weights


def save_weights(weights, path=None) -> Path:
    path = Path(path) if path is not None else config.BOT_WEIGHTS_PATH
    path.write_text(json.dumps([float(w) for w in weights]) + "\n")
    logger.info("Wrote %d weights to %s", len(weights), path)
    return path
