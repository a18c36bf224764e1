"""Diagnostics for the cycle time tool.

Reports go to stdout; everything logged here goes to stderr and, when asked,
to a file. GitPython's own logger is kept quiet unless it has something to
warn about, since it logs every git command it spawns at DEBUG.
"""

import logging
import sys
from typing import Iterable, Optional, Union

from .errors import InputError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("git",)


class StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time.

    Click's test runner and pytest's capsys swap ``sys.stderr`` per run, so
    the stream cannot be bound once at setup.
    """

    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def resolve_level(level: Union[str, int]) -> int:
    """Turn a level name (any case) or number into a logging level."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise InputError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as ``"debug"`` or a ``logging`` constant
        log_file: Optional path that also receives every record
        quiet: Loggers held at WARNING whatever ``level`` is
    """
    numeric_level = resolve_level(level)

    handlers = [StderrHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=handlers)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
