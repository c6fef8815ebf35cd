from __future__ import annotations

import logging
import os
from typing import Callable

from .errors import ConflictError

logger = logging.getLogger(__name__)

Confirm = Callable[[str, bool], bool]

OVERWRITE_PROMPT = "The output file '{}' already exists. Overwrite? (y/N) "


def terminal_path() -> str:
    return "CON" if os.name == "nt" else "/dev/tty"


def prompt_yes_no(message: str, default: bool) -> bool:
    """Ask on the controlling terminal; fall back to default without one.

    Reads the terminal directly so that redirected stdin does not answer
    the question by accident.
    """
    try:
        tty = open(terminal_path(), "r+")
    except OSError:
        return default
    with tty:
        tty.write(message)
        tty.flush()
        answer = tty.readline()
    answer = answer.strip().lower()
    if answer.startswith("y"):
        return True
    if answer.startswith("n"):
        return False
    return default


def ask(confirm: Confirm, message: str, default: bool = False) -> bool:
    """Run a confirmation callback; a failing callback means 'default'."""
    try:
        return bool(confirm(message, default))
    except Exception as exc:
        # KeyboardInterrupt is not an Exception and still ends the run
        logger.debug("confirmation failed (%r), using default %s", exc, default)
        return default


def should_proceed(target, forced: bool, confirm: Confirm) -> bool:
    """Decide whether an archive may be written at target.

    Missing targets are always fine. Existing directories are a conflict no
    matter what. Existing files are replaced when forced, otherwise only if
    confirm agrees (default no).
    """
    target = os.fspath(target)
    if not os.path.lexists(target):
        return True
    if os.path.isdir(target):
        raise ConflictError(target)
    if forced:
        logger.debug("overwriting %s", target)
        return True
    return ask(confirm, OVERWRITE_PROMPT.format(target), False)
