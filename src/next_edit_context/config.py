# next_edit_context/config.py
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def int_from_env(name: str, default: int) -> int:
    """Integer setting from the environment; unset or malformed values give ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using %d", name, raw, default)
        return default


DEFAULT_TOKEN_MODEL = os.getenv("NEXT_EDIT_TOKEN_MODEL", "gpt-4o-mini")
DEFAULT_PAGE_SIZE = int_from_env("NEXT_EDIT_PAGE_SIZE", 10)
DEFAULT_BASE_DEBOUNCE_MS = int_from_env("NEXT_EDIT_BASE_DEBOUNCE_MS", 200)

# Unset means the level is derived from user interactions
AGGRESSIVENESS_OVERRIDE = os.getenv("NEXT_EDIT_AGGRESSIVENESS") or None
