"""Logging setup for HiveMind: one named logger shared by every module."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "hivemind"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
    """Accept an int or a level name ("debug", "WARNING" ...); unknown names mean INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = LOGGER_NAME,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure and return the application logger.

    Safe to call more than once: the level is always re-applied, the stderr
    handler is added once, and a file handler is added once per path.

    Args:
        name: Logger name.
        level: Logging level, as an int or a level name.
        log_file: Optional log file. If None, logs go to stderr only.

    Returns:
        Configured logger.
    """
    log = logging.getLogger(name)
    log.setLevel(_resolve_level(level))
    fmt = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in log.handlers):
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(fmt)
        log.addHandler(h)

    if log_file:
        log_file = Path(log_file).resolve()
        known = {
            Path(h.baseFilename) for h in log.handlers if isinstance(h, logging.FileHandler)
        }
        if log_file not in known:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(fmt)
            log.addHandler(fh)

    return log


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return the application logger, or a child of it for a dotted name."""
    return logging.getLogger(name)
