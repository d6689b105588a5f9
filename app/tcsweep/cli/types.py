"""Shared types and helpers for CLI commands.

This module provides the exit codes, logging setup and the yes/no
prompt shared by the CLI command modules.
"""

import logging
from enum import Enum, IntEnum

import typer

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Handler installed by configure_logging, replaced on reconfiguration
_handler: logging.Handler | None = None


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    DECLINED = 1
    SETUP_FAILED = 2
    PARTIAL_FAILURE = 3


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a CLI run.

    Args:
        verbose: Log everything down to DEBUG.
        quiet: Log errors only.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(level)


def is_affirmative(answer: str | None) -> bool:
    """Check if a prompt answer means yes.

    Only ``y`` and ``yes`` (any case, surrounding whitespace ignored) count.
    """
    if answer is None:
        return False
    return answer.strip().casefold() in ("y", "yes")


def ask_yes_no(question: str) -> bool:
    """Ask a yes/no question on the terminal.

    Anything other than an explicit yes, including end of input, is a
    decline.

    Args:
        question: Question text without the ``[y/N]`` suffix.

    Returns:
        True only if the user answered yes.
    """
    try:
        answer = typer.prompt(f"{question} [y/N]", default="", show_default=False)
    except typer.Abort:
        return False
    return is_affirmative(answer)
