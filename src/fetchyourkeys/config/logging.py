"""
Centralized logging configuration.

bootstrap_logging() configures an application entry point (CLI tasks, tests)
from logging.ini. The library itself only logs through the 'fetchyourkeys'
logger; debug mode raises that logger to DEBUG and records a bounded history.
"""

import logging
import logging.config
import os
import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..models import LogEntry

PACKAGE_LOGGER = 'fetchyourkeys'
HISTORY_LIMIT = 1000
VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _find_logging_config() -> Optional[Path]:
    """Find logging.ini in the current directory or config/ subdirectory."""
    for candidate in (Path('logging.ini'), Path('config/logging.ini')):
        if candidate.exists():
            return candidate
    return None


def _setup_environment_variables():
    """Default LOG_LEVEL to INFO so the INI file always has a valid value."""
    if 'LOG_LEVEL' not in os.environ:
        os.environ['LOG_LEVEL'] = 'INFO'

    log_level = os.environ['LOG_LEVEL'].strip().upper()
    if log_level not in VALID_LEVELS:
        print(f"Warning: Invalid LOG_LEVEL '{log_level}', using INFO", file=sys.stderr)
        os.environ['LOG_LEVEL'] = 'INFO'


def bootstrap_logging(name: Optional[str] = None) -> None:
    """
    Bootstrap logging for an application entry point.

    This function:
    1. Sets up LOG_LEVEL for INI file substitution
    2. Loads logging.ini using logging.config.fileConfig(), or falls back to basicConfig
    3. Applies the LOG_LEVEL override to the root logger

    Args:
        name: Optional logger name used for the confirmation message
    """
    _setup_environment_variables()
    level = getattr(logging, os.environ['LOG_LEVEL'].strip().upper())

    config_path = _find_logging_config()
    if config_path is None:
        logging.basicConfig(
            level=level,
            format='%(levelname)s: %(name)s: %(message)s',
            stream=sys.stderr
        )
        return

    try:
        logging.config.fileConfig(
            str(config_path),
            defaults={'LOG_LEVEL': logging.getLevelName(level)},
            disable_existing_loggers=False
        )
        logging.getLogger().setLevel(level)
        logging.getLogger(name).debug(f"Logging configured from {config_path}")
    except Exception as e:
        print(f"Warning: Failed to load logging config from {config_path}: {e}", file=sys.stderr)
        logging.basicConfig(
            level=level,
            format='%(levelname)s: %(name)s: %(message)s',
            stream=sys.stderr
        )


class LogHistoryHandler(logging.Handler):
    """Keeps the most recent records in memory for get_log_history()."""

    def __init__(self, capacity: int = HISTORY_LIMIT):
        super().__init__(level=logging.DEBUG)
        self._records = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._records.append(LogEntry(
                timestamp=self.formatTime(record),
                level=record.levelname.lower(),
                message=record.getMessage(),
                logger=record.name,
            ))
        except Exception:
            self.handleError(record)

    def formatTime(self, record: logging.LogRecord) -> str:
        return datetime.fromtimestamp(record.created, timezone.utc).isoformat()

    def history(self) -> List[LogEntry]:
        return list(self._records)


_history_handler: Optional[LogHistoryHandler] = None
_console_handler: Optional[logging.Handler] = None


def _package_logger() -> logging.Logger:
    return logging.getLogger(PACKAGE_LOGGER)


def enable_debug(silent_mode: bool = False) -> None:
    """Turn on debug logging for the package, recording history.

    Args:
        silent_mode: Record history without printing to the console
    """
    global _history_handler
    logger = _package_logger()
    logger.setLevel(logging.DEBUG)
    if _history_handler is None:
        _history_handler = LogHistoryHandler()
        logger.addHandler(_history_handler)
    set_silent_mode(silent_mode)
    logger.debug("Debug mode enabled")


def disable_debug() -> None:
    global _history_handler
    logger = _package_logger()
    logger.setLevel(logging.NOTSET)
    if _history_handler is not None:
        logger.removeHandler(_history_handler)
        _history_handler = None
    set_silent_mode(True)


def set_silent_mode(silent: bool) -> None:
    """Attach or detach the package console handler (debug mode only)."""
    global _console_handler
    logger = _package_logger()
    if silent and _console_handler is not None:
        logger.removeHandler(_console_handler)
        _console_handler = None
    elif not silent and _console_handler is None and _history_handler is not None:
        _console_handler = logging.StreamHandler(sys.stderr)
        _console_handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s: %(name)s: %(message)s'))
        logger.addHandler(_console_handler)


def get_log_history() -> List[LogEntry]:
    if _history_handler is None:
        return []
    return _history_handler.history()
