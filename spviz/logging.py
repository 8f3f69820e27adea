"""
logging.py — Centralised Logging
=================================
Every module asks for its logger through `get_logger(__name__)` so all
output hangs off the single "spviz" root logger and shares one handler.

    from spviz.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional

_ROOT_NAME = "spviz"
_ROOT_LOGGER_CONFIGURED = False


def setup_root_logger(
    level: int = logging.WARNING,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach one handler to the "spviz" logger.  Safe to call repeatedly."""
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(_ROOT_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(handler)

    # propagate so pytest's caplog still sees records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Child logger of "spviz"; level is inherited from the root."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    setup_root_logger()
    root_logger = logging.getLogger(_ROOT_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def level_from_name(name: Optional[str], default: int = logging.WARNING) -> int:
    """'debug' / 'INFO' / … → logging level; unknown names give `default`."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def reset_logging() -> None:
    """Drop the handler so the next get_logger() re-configures (tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(_ROOT_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
