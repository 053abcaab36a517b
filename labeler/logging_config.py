"""Logging for labeling runs and the collector service.

Each preset logger writes to its own file under ``LOG_DIR`` and echoes to
the console. Module loggers (``labeler.pipeline``, ``collector.storage``...)
propagate to the preset of their package.

Environment:
    LOG_DIR: directory for log files (default ``./logs``)
    LOG_LEVEL: console level name (default ``INFO``); files always get DEBUG
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

LOG_DIR = Path(os.getenv("LOG_DIR", str(Path.cwd() / "logs")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Loggers that already carry our handlers
_configured_loggers: set[str] = set()


def _level(value: Union[str, int, None]) -> int:
    if value is None:
        value = LOG_LEVEL
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def setup_logger(
    name: str,
    filename: str,
    level: Union[str, int, None] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach file and console handlers to ``name`` once.

    Args:
        name: Logger name (e.g. 'labeler', 'collector')
        filename: Log file name inside the log directory (e.g. 'labeler.log')
        level: Console level; ``LOG_LEVEL`` when omitted
        log_dir: Overrides ``LOG_DIR`` for this logger

    A repeated call only updates the console level.
    """
    logger = logging.getLogger(name)
    console_level = _level(level)

    if name in _configured_loggers:
        for handler in logger.handlers:
            if getattr(handler, "_labeler_console", False):
                handler.setLevel(console_level)
        return logger

    directory = Path(log_dir) if log_dir else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    fh = logging.FileHandler(directory / filename, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    ))

    sh = logging.StreamHandler()
    sh.setLevel(console_level)
    sh.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(message)s"))
    sh._labeler_console = True  # type: ignore[attr-defined]

    logger.addHandler(fh)
    logger.addHandler(sh)

    _configured_loggers.add(name)
    return logger


def get_labeler_logger(
    level: Union[str, int, None] = None, log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Logger for labeling runs (CLI side)."""
    return setup_logger("labeler", "labeler.log", level=level, log_dir=log_dir)


def get_collector_logger() -> logging.Logger:
    """Logger for the dataset collector service."""
    return setup_logger("collector", "collector.log")
