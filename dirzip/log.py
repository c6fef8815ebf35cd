"""
Log file support modelled on zip's -lf/-la/-li options.

Console progress is plain print() output and is not routed through here.
The log file receives warnings and errors, and with log_info also one
"adding: <name>" line per member and one line per archive.
"""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "dirzip"
LOG_FORMAT = "%(message)s"
DEBUG_ENV = "DIRZIP_DEBUG"


def setup_logging(log_file=None, append: bool = False, info: bool = False) -> logging.Logger:
    """Configure the package logger and return it.

    Without a log file only warnings reach stderr (debug with DIRZIP_DEBUG
    set). Calling again replaces previously installed handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    debug = bool(os.environ.get(DEBUG_ENV))
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(name)s: %(levelname)s: %(message)s"))
    console.setLevel(logging.DEBUG if debug else logging.WARNING)
    # errors that end the run are reported by the CLI itself
    console.addFilter(lambda record: record.levelno < logging.ERROR)
    logger.addHandler(console)

    if log_file is not None:
        handler = logging.FileHandler(log_file, mode="a" if append else "w", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(logging.INFO if info else logging.WARNING)
        logger.addHandler(handler)
    return logger


def close_logging() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
