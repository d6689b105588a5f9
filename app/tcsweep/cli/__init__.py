"""CLI package for tcsweep.

This package contains the Typer application and all subcommands.
"""

from tcsweep.cli.main import app

__all__ = ["app"]
