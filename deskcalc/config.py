"""Runtime settings and logging setup for deskcalc.

Settings come from DESKCALC_* environment variables with built-in defaults.
Self-contained: nothing is read from disk.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

import structlog

from deskcalc.models import HISTORY_LIMIT

_ENV_PREFIX = "DESKCALC_"


@dataclass
class Settings:
    """Session settings."""

    history_limit: int = HISTORY_LIMIT
    log_level: str = "WARNING"


def _positive_int(raw: Optional[str], default: int) -> int:
    """Parse a positive int, falling back to ``default`` on anything else."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(env: Optional[dict[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    The history limit can be lowered but never raised above HISTORY_LIMIT.

    Args:
        env: Mapping to read instead of os.environ (used by tests).
    """
    env = os.environ if env is None else env
    return Settings(
        history_limit=min(
            _positive_int(env.get(f"{_ENV_PREFIX}HISTORY_LIMIT"), HISTORY_LIMIT),
            HISTORY_LIMIT,
        ),
        log_level=env.get(f"{_ENV_PREFIX}LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Route structlog output to stderr, dropping events below ``level``."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
