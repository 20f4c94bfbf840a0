"""Logging for the facescanner package.

Every module logs through a child of the ``facescanner`` logger, so one call
to :func:`setup_logging` decides where all of the package's messages go. The
console output is colored only when its stream is a terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "facescanner"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level and logger name in ANSI colors."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, use_color: bool = True):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname)
        if not self.use_color or color is None:
            return super().format(record)

        # Records are shared between handlers; only the copy gets the escapes
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
        colored.name = f"{self.BOLD}{record.name}{self.RESET}"
        return super().format(colored)


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        from facescanner.config import get_config

        try:
            level = get_config().log_level
        except ValueError:
            level = "INFO"
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the package logger, replacing any earlier configuration.

    Args:
        level: Log level name. If None, LOG_LEVEL is read through Config.
        log_file: Optional path that receives the same messages, uncolored.
        stream: Console stream (defaults to stdout).

    Returns:
        The ``facescanner`` logger.

    Example:
        >>> setup_logging("DEBUG", log_file="scan.log")
        >>> get_logger("facescanner.engine").info("Engine ready")
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(_resolve_level(level))

    stream = stream if stream is not None else sys.stdout
    console = logging.StreamHandler(stream)
    console.setFormatter(ColoredFormatter(use_color=_is_terminal(stream)))
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package logger, configuring it on first use.

    Args:
        name: Module name (typically __name__)
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logging()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
