"""Clean command implementation.

Finds TwinCAT residue, asks for confirmation and removes it.
"""

import logging
from typing import Annotated

import typer

from tcsweep.backends.environment import broadcast_environment_change
from tcsweep.cli.display import (
    create_candidates_table,
    create_results_table,
    print_manual_warnings,
    print_outcome_summary,
)
from tcsweep.cli.types import ExitCode, ask_yes_no
from tcsweep.core.catalog import Catalog, load_catalog
from tcsweep.core.errors import SetupError
from tcsweep.core.executor import Executor
from tcsweep.core.matcher import PatternMatcher
from tcsweep.core.pipeline import (
    get_available_collectors,
    get_removers,
    get_sweep_collector,
    run_collectors,
)
from tcsweep.core.reconcile import build_deletion_plan
from tcsweep.models.candidate import CandidateSet
from tcsweep.models.outcome import RunOutcome
from tcsweep.utils.elevation import require_admin
from tcsweep.utils.formatting import console, print_error, print_info, print_success

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Find and remove TwinCAT residue.",
    invoke_without_command=True,
)


def _setup(*, need_admin: bool) -> tuple[Catalog, PatternMatcher]:
    """Check elevation and load the catalog.

    Raises:
        typer.Exit: With SETUP_FAILED if either step fails.
    """
    try:
        if need_admin:
            require_admin()
        catalog = load_catalog()
    except SetupError as e:
        print_error(str(e))
        raise typer.Exit(code=ExitCode.SETUP_FAILED) from e
    return catalog, PatternMatcher(catalog.patterns)


def _show_findings(candidate_sets: list[CandidateSet], title: str) -> None:
    found = [c for candidates in candidate_sets for c in candidates]
    if found:
        console.print(create_candidates_table(found, title))
    else:
        print_info("Nothing found.")


def run_clean(dry_run: bool = False) -> None:
    """Run the interactive clean flow.

    Args:
        dry_run: If True, report what would be removed without removing.

    Raises:
        typer.Exit: With the run's exit code whenever it is not OK.
    """
    catalog, matcher = _setup(need_admin=not dry_run)

    print_info("Searching for TwinCAT residue...")
    candidate_sets = run_collectors(get_available_collectors(catalog, matcher))
    _show_findings(candidate_sets, "Findings")

    if ask_yes_no("\nRun a full sweep of all volumes? This can take a long time."):
        print_info("Sweeping all volumes...")
        sweep_found = get_sweep_collector(catalog, matcher).collect()
        _show_findings([sweep_found], "Full-volume sweep")
        candidate_sets.append(sweep_found)

    plan = build_deletion_plan(candidate_sets)
    if plan.is_empty:
        print_success("No TwinCAT residue found.")
        return

    executor = Executor(get_removers(), dry_run=dry_run)
    outcome = RunOutcome()

    if plan.removable:
        console.print(create_candidates_table(plan.removable, "Deletion Set"))
        if not dry_run and not ask_yes_no(f"\nDelete {len(plan.removable)} item(s)?"):
            print_info("Aborted.")
            raise typer.Exit(code=ExitCode.DECLINED)
        outcome = outcome.merge(executor.execute(plan.removable))

    if plan.environment:
        console.print(create_candidates_table(plan.environment, "Environment Entries"))
        question = f"\nRemove {len(plan.environment)} environment entries?"
        if dry_run or ask_yes_no(question):
            env_outcome = executor.execute(plan.environment)
            outcome = outcome.merge(env_outcome)
            if env_outcome.deleted and broadcast_environment_change():
                logger.debug("Broadcast environment change")
        else:
            print_info("Environment left unchanged.")

    print_manual_warnings([*plan.warnings, *outcome.warnings])

    if outcome.results:
        console.print(create_results_table(outcome.results, dry_run=dry_run))
    print_outcome_summary(outcome, dry_run=dry_run)

    if outcome.failed:
        raise typer.Exit(code=ExitCode.PARTIAL_FAILURE)


@app.callback(invoke_without_command=True)
def clean(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be removed without making changes.",
        ),
    ] = False,
) -> None:
    """Find TwinCAT residue and remove it after confirmation.

    Searches known install locations, profile folders, services,
    scheduled tasks, the environment and the registry. Optionally sweeps
    every mounted volume. Services and scheduled tasks are reported with
    the commands to remove them manually.

    Examples:
        tcsweep clean               # Interactive clean (requires admin)
        tcsweep clean --dry-run     # Preview what would be removed
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    run_clean(dry_run=dry_run)
