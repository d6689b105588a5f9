"""CLI commands for tcsweep.

This package contains all subcommand implementations.
"""

from tcsweep.cli.commands import clean, scan

__all__ = ["clean", "scan"]
