"""Configuration constants, animation defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The sidebar type set, the default and fallback
animations, and the service defaults are plain data structures, so the layout engine, the mapper and the server
all read the same values.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level sets, dicts, and scalars. Numeric env overrides are
parsed by small helpers that fail loudly on garbage.

RULES:
- SIDEBAR_TYPES is fixed at startup (exact type-name match)
- STAGGER_UNIT is the per-index enter delay in seconds (default 0.1)
- ANIMATION_TIMEOUT_S bounds every animation wait (default 5.0)
- All defaults can be overridden via UI_ASSEMBLY_* environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the service is started from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

SIDEBAR_TYPES: frozenset[str] = frozenset({"FilterPanel", "NavigationPanel"})
"""Component types placed in the sidebar by the two-column layout."""

# ---------------------------------------------------------------------------
# Animation defaults
# ---------------------------------------------------------------------------

STAGGER_UNIT = _env_float("UI_ASSEMBLY_STAGGER_UNIT", 0.1)

DEFAULT_ANIMATION: dict = {"enter": "fadeIn", "exit": "fadeOut", "duration": 0.5}
"""Animation a merged instruction starts from before rules override it."""

FALLBACK_ANIMATION: dict = {"enter": "fadeIn", "exit": "fadeOut", "duration": 0.3}
"""Short fade used by the no-match fallback instruction."""

CLEAR_ANIMATION: dict = {"enter": "fadeOut", "exit": "fadeOut", "duration": 0.3}
"""Exit animation used when the whole surface is cleared."""

ANIMATION_TIMEOUT_S = _env_float("UI_ASSEMBLY_ANIMATION_TIMEOUT_S", 5.0)
ANIMATION_EXECUTOR = os.getenv("UI_ASSEMBLY_ANIMATION_EXECUTOR", "timed")
TIME_SCALE = _env_float("UI_ASSEMBLY_TIME_SCALE", 1.0)

# ---------------------------------------------------------------------------
# Service defaults
# ---------------------------------------------------------------------------

HOST = os.getenv("UI_ASSEMBLY_HOST", "0.0.0.0")
PORT = _env_int("UI_ASSEMBLY_PORT", 8000)
BASE_URL = os.getenv("UI_ASSEMBLY_BASE_URL", "http://localhost:8000")
LOG_LEVEL = os.getenv("UI_ASSEMBLY_LOG_LEVEL", "INFO").upper()
SESSION_TTL_S = _env_int("UI_ASSEMBLY_SESSION_TTL_S", 3600)
MAX_SESSIONS = _env_int("UI_ASSEMBLY_MAX_SESSIONS", 100)
