"""
config.py — Tunables
=====================
Plain dataclasses with defaults.  The host overrides fields per request;
nothing here is read from disk.

    GenerationParams  – knobs for the random graph generator
    PlaybackConfig    – auto-replay interval and default algorithm
    SPEED_PRESETS     – named tick intervals (seconds per step)
    AppConfig         – secret key, log level and session cap from the environment
    parse_bool        – strict reading of boolean request flags
"""

import os
from dataclasses import dataclass
from typing import Dict


# ---------------------------------------------------------------------------
# Speed presets (seconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS: Dict[str, float] = {
    "slow":   1.8,    # teaching mode
    "medium": 1.0,
    "fast":   0.6,
    "turbo":  0.2,    # demo mode
}

MIN_INTERVAL = 0.02

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off", ""}


def parse_bool(value) -> bool:
    """Read a JSON or form flag.  Strings are matched by word, not truthiness."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def speed_from_slider(level: int) -> float:
    """Map the 1–5 speed slider onto seconds per step (1 → 1.8 s, 5 → 0.2 s)."""
    level = max(1, min(5, int(level)))
    return (2200 - level * 400) / 1000.0


# ---------------------------------------------------------------------------
# Graph generation
# ---------------------------------------------------------------------------
@dataclass
class GenerationParams:
    node_count:           int   = 6
    density:              float = 0.5
    min_weight:           int   = 1
    max_weight:           int   = 20
    allow_negative_edges: bool  = False
    canvas_width:         float = 800.0
    canvas_height:        float = 500.0

    @classmethod
    def from_dict(cls, data: dict) -> "GenerationParams":
        """Build from a request payload, ignoring unknown keys."""
        defaults = cls()
        return cls(
            node_count=int(data.get("nodes", defaults.node_count)),
            density=float(data.get("density", defaults.density)),
            min_weight=int(data.get("min_weight", defaults.min_weight)),
            max_weight=int(data.get("max_weight", defaults.max_weight)),
            allow_negative_edges=parse_bool(data.get("allow_negative", defaults.allow_negative_edges)),
            canvas_width=float(data.get("width", defaults.canvas_width)),
            canvas_height=float(data.get("height", defaults.canvas_height)),
        )


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------
@dataclass
class PlaybackConfig:
    interval:          float = SPEED_PRESETS["medium"]
    default_algorithm: str   = "dijkstra"


# ---------------------------------------------------------------------------
# Web host
# ---------------------------------------------------------------------------
@dataclass
class AppConfig:
    secret_key:   str = ""
    log_level:    str = "WARNING"
    max_sessions: int = 256

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            secret_key=os.environ.get("SPVIZ_SECRET_KEY", ""),
            log_level=os.environ.get("SPVIZ_LOG_LEVEL", "WARNING"),
            max_sessions=int(os.environ.get("SPVIZ_MAX_SESSIONS", "256")),
        )


GENERATION_DEFAULTS = GenerationParams()
PLAYBACK_DEFAULTS = PlaybackConfig()
