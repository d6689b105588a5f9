"""Shared Rich display functions for findings and results.

Provides reusable table builders and summary printers for displaying
discovered candidates, execution results and manual-action warnings
across CLI commands (clean, scan).
"""

from collections.abc import Iterable

from rich.table import Table

from tcsweep.models.candidate import Candidate, CandidateKind
from tcsweep.models.outcome import ItemResult, ItemState, RunOutcome
from tcsweep.utils.formatting import console, print_success, print_warning

KIND_LABELS: dict[CandidateKind, str] = {
    CandidateKind.FILESYSTEM_PATH: "path",
    CandidateKind.REGISTRY_KEY: "registry",
    CandidateKind.SERVICE: "service",
    CandidateKind.SCHEDULED_TASK: "task",
    CandidateKind.ENV_VAR: "env",
}

_STATE_LABELS: dict[ItemState, str] = {
    ItemState.DELETED_PRIMARY: "[success]OK[/success]",
    ItemState.DELETED_FALLBACK: "[success]OK*[/success]",
    ItemState.GONE: "[muted]GONE[/muted]",
    ItemState.DRY_RUN: "[info]WOULD[/info]",
    ItemState.FAILED: "[error]FAIL[/error]",
}


def format_kind(kind: CandidateKind) -> str:
    """Format a candidate kind with its theme style."""
    return f"[kind.{kind.value}]{KIND_LABELS[kind]}[/]"


def create_candidates_table(candidates: Iterable[Candidate], title: str) -> Table:
    """Create a Rich table displaying candidates.

    Args:
        candidates: Candidates to display, in display order.
        title: Table title.

    Returns:
        Rich Table configured for candidate display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Kind", width=8)
    table.add_column("Item", overflow="fold")
    table.add_column("Detail", style="muted", overflow="ellipsis")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Found by", style="muted")

    for candidate in candidates:
        table.add_row(
            format_kind(candidate.kind),
            candidate.label,
            candidate.detail or "",
            candidate.size_human if candidate.kind == CandidateKind.FILESYSTEM_PATH else "",
            candidate.source or "",
        )

    return table


def create_results_table(results: Iterable[ItemResult], dry_run: bool = False) -> Table:
    """Create a Rich table displaying per-item execution results.

    Args:
        results: Item results to display.
        dry_run: Whether this was a dry-run (changes table title).

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title="Results (Dry Run)" if dry_run else "Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Kind", width=8)
    table.add_column("Item", overflow="fold")
    table.add_column("Message")

    for result in results:
        message = result.error or ""
        if result.state == ItemState.DELETED_FALLBACK:
            message = "removed by fallback"
        table.add_row(
            _STATE_LABELS[result.state],
            format_kind(result.candidate.kind),
            result.candidate.label,
            f"[muted]{message}[/muted]",
        )

    return table


def manual_action_hint(candidate: Candidate) -> str:
    """Return the command a user can run to remove a reported-only item."""
    if candidate.kind == CandidateKind.SERVICE:
        return f'sc stop "{candidate.identifier}" && sc delete "{candidate.identifier}"'
    if candidate.kind == CandidateKind.SCHEDULED_TASK:
        return f'schtasks /Delete /TN "{candidate.identifier}" /F'
    return "remove manually"


def print_manual_warnings(candidates: list[Candidate]) -> None:
    """Print items that were left untouched together with removal hints.

    Args:
        candidates: Services, tasks and other items without a remover.
    """
    if not candidates:
        return

    print_warning(f"{len(candidates)} item(s) need manual action:")
    for candidate in candidates:
        detail = f" ({candidate.detail})" if candidate.detail else ""
        console.print(f"  {format_kind(candidate.kind)} {candidate.label}{detail}")
        console.print(f"    [muted]{manual_action_hint(candidate)}[/muted]")


def print_outcome_summary(outcome: RunOutcome, dry_run: bool = False) -> None:
    """Print the deleted/failed/gone counters of a run.

    Failed items are listed below the counters with their errors.

    Args:
        outcome: Aggregate outcome of all execution passes.
        dry_run: Whether this was a dry-run.
    """
    if dry_run:
        would = sum(1 for r in outcome.results if r.state == ItemState.DRY_RUN)
        console.print(f"\n[info]Dry run:[/info] {would} item(s) would be removed.")
        return

    if outcome.failed == 0:
        print_success(f"Deleted {outcome.deleted} item(s), {outcome.gone} already gone.")
    else:
        console.print(
            f"\n[success]{outcome.deleted} deleted[/success], "
            f"[error]{outcome.failed} failed[/error], "
            f"[muted]{outcome.gone} already gone[/muted]"
        )
        for result in outcome.failures:
            console.print(
                f"  {format_kind(result.candidate.kind)} {result.candidate.label}: "
                f"[error]{result.error}[/error]"
            )
