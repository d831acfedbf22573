"""
Logging configuration — one console handler, plus an optional log file.

``configure_from_env`` is called once by main.py.  The console level comes
from the CLI flags, falling back to ``CPB_LOG_LEVEL`` and then WARNING.
``CPB_LOG_FILE`` adds a file handler at ``CPB_LOG_FILE_LEVEL`` (default:
the console level).
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "CPB_LOG_LEVEL"
ENV_FILE = "CPB_LOG_FILE"
ENV_FILE_LEVEL = "CPB_LOG_FILE_LEVEL"

_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"

# Console format by threshold, most verbose first
_CONSOLE_FORMATS = (
    (logging.DEBUG, _DETAIL, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)

# bs4 warns about markup that looks like a URL or filename
_NOISY_LOGGERS = ("bs4",)


def _parse_level(level: str | None) -> int:
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = "%(message)s", None
    for threshold, threshold_fmt, threshold_datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            fmt, datefmt = threshold_fmt, threshold_datefmt
            break
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DETAIL, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers.

    Args:
        level: Console level name; unknown names mean WARNING.
        log_file: Optional path of a log file.
        log_file_level: Level for the log file, defaults to ``level``.
        quiet_third_party: Hold noisy library loggers at WARNING unless
            the console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def configure_from_env(level: str | None = None, debug: bool = False) -> None:
    """Set up logging from a CLI-chosen level and the CPB_* variables."""
    setup_logging(
        level=level or os.environ.get(ENV_LEVEL, "WARNING"),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )
