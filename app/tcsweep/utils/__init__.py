"""Utility modules for tcsweep.

This module exports commonly used utility functions.
"""

from tcsweep.utils.elevation import is_admin, require_admin
from tcsweep.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from tcsweep.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "is_admin",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "require_admin",
    "run_command",
]
