"""Scan command implementation.

Reports TwinCAT residue without prompting or removing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from tcsweep.cli.display import create_candidates_table, print_manual_warnings
from tcsweep.cli.types import ExitCode, OutputFormat
from tcsweep.core.catalog import load_catalog
from tcsweep.core.errors import CatalogError
from tcsweep.core.matcher import PatternMatcher
from tcsweep.core.pipeline import get_available_collectors, get_sweep_collector, run_collectors
from tcsweep.core.reconcile import build_deletion_plan
from tcsweep.models.report import ScanReport
from tcsweep.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Report TwinCAT residue without removing anything.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_residue(
    ctx: typer.Context,
    sweep: Annotated[
        bool,
        typer.Option(
            "--sweep",
            "-s",
            help="Also sweep every directory of every mounted volume (slow).",
        ),
    ] = False,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export the report to a JSON file.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan for TwinCAT residue and print a report.

    Does not require administrator rights; items only an administrator
    can read are skipped.

    Examples:
        tcsweep scan                        # Show findings as tables
        tcsweep scan --sweep                # Include the full-volume sweep
        tcsweep scan --format json          # Output as JSON
        tcsweep scan --export report.json   # Export to JSON file
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    try:
        catalog = load_catalog()
    except CatalogError as e:
        print_error(str(e))
        raise typer.Exit(code=ExitCode.SETUP_FAILED) from e
    matcher = PatternMatcher(catalog.patterns)

    collectors = get_available_collectors(catalog, matcher)
    if sweep:
        collectors.append(get_sweep_collector(catalog, matcher))
    candidate_sets = run_collectors(collectors)
    plan = build_deletion_plan(candidate_sets)

    report = ScanReport.create(
        candidates=[c for candidates in candidate_sets for c in candidates],
        plan=plan,
        collectors=[collector.name for collector in collectors],
        sweep=sweep,
    )

    # Handle export (always JSON regardless of format option)
    if export_path is not None:
        export_path = export_path.resolve()
        if export_path.is_dir():
            print_error(f"Export path is a directory: {export_path}")
            raise typer.Exit(code=ExitCode.SETUP_FAILED)
        try:
            export_path.parent.mkdir(parents=True, exist_ok=True)
            export_path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
            print_info(f"Report exported to {export_path}")
        except OSError as e:
            print_error(f"Failed to export: {e}")
            raise typer.Exit(code=ExitCode.SETUP_FAILED) from e

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
        return

    if plan.is_empty:
        print_success("No TwinCAT residue found.")
        return

    if plan.removable:
        console.print(create_candidates_table(plan.removable, "Deletion Set"))
    if plan.environment:
        console.print(create_candidates_table(plan.environment, "Environment Entries"))
    print_manual_warnings(plan.warnings)

    total = report.summary["total"]
    console.print(
        f"\n[dim]{total} candidate(s) found, {report.summary['planned']} after reconciliation[/]"
    )
