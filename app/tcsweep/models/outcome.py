"""Execution outcome models.

This module defines per-item terminal states and the aggregate run
outcome returned by the executor. Outcomes are plain values created
fresh for each run and never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum

from tcsweep.models.candidate import Candidate


class ItemState(str, Enum):
    """Terminal state of a single deletion item.

    Attributes:
        GONE: Item vanished between discovery and execution.
        DELETED_PRIMARY: Removed by the primary mechanism.
        DELETED_FALLBACK: Removed by the fallback mechanism.
        FAILED: Both mechanisms failed.
        DRY_RUN: Item exists and would have been removed.
    """

    GONE = "gone"
    DELETED_PRIMARY = "deleted"
    DELETED_FALLBACK = "deleted_fallback"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass(frozen=True, slots=True)
class ItemResult:
    """Result of processing one item of a deletion set.

    Attributes:
        candidate: The candidate that was processed.
        state: Terminal state reached.
        error: Captured error message for failed items.
    """

    candidate: Candidate
    state: ItemState
    error: str | None = None

    @property
    def deleted(self) -> bool:
        """Check if the item was removed by either mechanism."""
        return self.state in (ItemState.DELETED_PRIMARY, ItemState.DELETED_FALLBACK)

    @property
    def failed(self) -> bool:
        """Check if the item could not be removed."""
        return self.state == ItemState.FAILED


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Aggregate outcome of an execution pass.

    Attributes:
        results: Per-item results in execution order.
        warnings: Candidates left untouched that need manual action.
    """

    results: tuple[ItemResult, ...] = field(default_factory=tuple)
    warnings: tuple[Candidate, ...] = field(default_factory=tuple)

    @property
    def deleted(self) -> int:
        """Number of items removed."""
        return sum(1 for r in self.results if r.deleted)

    @property
    def failed(self) -> int:
        """Number of items that could not be removed."""
        return sum(1 for r in self.results if r.failed)

    @property
    def gone(self) -> int:
        """Number of items that had already vanished."""
        return sum(1 for r in self.results if r.state == ItemState.GONE)

    @property
    def failures(self) -> list[ItemResult]:
        """Return the failed item results."""
        return [r for r in self.results if r.failed]

    def merge(self, other: "RunOutcome") -> "RunOutcome":
        """Combine two outcomes, keeping execution order."""
        return RunOutcome(
            results=self.results + other.results,
            warnings=self.warnings + other.warnings,
        )
