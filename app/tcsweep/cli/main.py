"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from tcsweep import __version__
from tcsweep.cli.commands import clean, scan
from tcsweep.cli.types import configure_logging

# Create main Typer app
app = typer.Typer(
    name="tcsweep",
    help="Find and remove Beckhoff TwinCAT residue on Windows.",
    invoke_without_command=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tcsweep version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
) -> None:
    """tcsweep - Find and remove Beckhoff TwinCAT residue.

    Without a command, runs the interactive clean.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose=verbose, quiet=quiet)

    if ctx.invoked_subcommand is None:
        clean.run_clean()


# Register commands
app.add_typer(clean.app, name="clean")
app.add_typer(scan.app, name="scan")


if __name__ == "__main__":
    app()
