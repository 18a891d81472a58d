"""Configuration for the adaptive budget engine.

This module centralises thresholds, the fallback budget table and the
environment variable overrides used across the package.
"""

from __future__ import annotations

import logging
import os

UNCATEGORIZED = "Uncategorized"

# Used when a category has no adaptive budget of its own.
FALLBACK_BUDGETS: dict[str, float] = {
    "Food and Drink": 800.0,
    "Travel": 500.0,
    "Entertainment": 400.0,
    "Shopping": 600.0,
    "Transportation": 900.0,
}

RECENT_WINDOW_MONTHS = 3
MAX_RECENT_WEIGHT = 0.7
RECENT_WEIGHT_DIVISOR = 4

PACE_TOLERANCE = 0.10
TREND_STABLE_BAND = 5.0
TREND_ALERT_THRESHOLD = 15.0
GOOD_SAVINGS_RATE = 20.0
LOW_SAVINGS_RATE = 15.0
TOP_PROGRESS_CATEGORIES = 3
TRENDING_LIMIT = 3
OVERVIEW_UNDER_BUDGET_PCT = 85.0

LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LOG_LEVEL = os.getenv("ADAPTIVE_BUDGET_LOG_LEVEL", "WARNING")
DEFAULT_ENGINE_CACHE_SIZE = 32

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r; expected an integer, using %d", name, raw, default)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r; expected a positive integer, using %d", name, raw, default)
        return default
    return value


ENGINE_CACHE_SIZE = _env_int("ADAPTIVE_BUDGET_CACHE_SIZE", DEFAULT_ENGINE_CACHE_SIZE)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_openai_api_key() -> str | None:
    """Return the OpenAI key from the environment, if configured."""

    return os.getenv("OPENAI_API_KEY") or None


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling it more than once replaces the previous handler instead of
    stacking duplicates.
    """

    logger = logging.getLogger("adaptive_budget")
    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = getattr(logging, resolved.upper(), logging.WARNING)
    logger.setLevel(resolved)

    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    return logger
