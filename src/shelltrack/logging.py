"""Logging for shelltrack.

All modules log through children of the ``shelltrack`` logger obtained with
``get_logger``. Nothing is emitted until ``setup_logging`` installs a handler:

- a log file from ``logging.file`` or ``$SHELLTRACK_LOG``
- otherwise stderr, but only when stderr is an interactive console

Two extra levels sit around DEBUG/INFO: VERBOSE (15) for detailed
diagnostics and TRACE (5) for per-chunk output tracing.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shelltrack.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("shelltrack")

LOG_ENV_VAR = "SHELLTRACK_LOG"

_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"

_initialized = False

_NAMED_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# -v count: 0 errors only ... 4 everything
_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class _LowercaseLevelFormatter(logging.Formatter):
    """Renders ``info:`` instead of ``INFO:``."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Effective level for a logging config.

    ``verbose`` wins over ``level``. Verbosity above 4 means TRACE; an
    unknown level name means INFO.
    """
    if config is not None and config.verbose is not None:
        index = min(max(config.verbose, 0), len(_VERBOSITY_LEVELS) - 1)
        return _VERBOSITY_LEVELS[index]
    if config is not None and config.level:
        return _NAMED_LEVELS.get(config.level.upper(), logging.INFO)
    return logging.INFO


def _log_path(config: LoggingConfig | None) -> str | None:
    path = (config.file if config else None) or os.environ.get(LOG_ENV_VAR)
    return os.path.expanduser(path) if path else None


def _open_handler(path: str | None) -> logging.Handler | None:
    if path:
        try:
            return logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            if not sys.stderr.isatty():
                return None
            print(f"[shelltrack] Cannot open log file {path}: {e}", file=sys.stderr)
            return logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        return logging.StreamHandler(sys.stderr)
    # Piped stderr belongs to the host; stay silent
    return None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Install the shelltrack handler. Only the first call has an effect.

    Args:
        config: Level, verbosity and log file settings. Without a config the
            level is INFO and ``$SHELLTRACK_LOG`` picks the file.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = resolve_level(config)
    logger.setLevel(level)

    handler = _open_handler(_log_path(config))
    if handler is None:
        return
    handler.setLevel(level)
    handler.setFormatter(_LowercaseLevelFormatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)


def reset_logging() -> None:
    """Remove installed handlers so setup_logging() can run again."""
    global _initialized
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _initialized = False


def get_logger(name: str | None = None) -> logging.Logger:
    """The package logger, or its child ``shelltrack.<name>``."""
    return logger.getChild(name) if name else logger
