"""Deletion execution with primary and fallback mechanisms.

The executor walks a deletion set in order and drives each item to a
terminal state. A failure on one item never aborts the batch and
nothing is rolled back.
"""

import logging
import subprocess
from collections.abc import Callable, Iterable

from tcsweep.core.errors import RemovalError
from tcsweep.core.removers import Remover
from tcsweep.models.candidate import Candidate, CandidateKind
from tcsweep.models.outcome import ItemResult, ItemState, RunOutcome

logger = logging.getLogger(__name__)

# Failures that trigger the fallback mechanism
REMOVAL_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    RemovalError,
    subprocess.SubprocessError,
)


class Executor:
    """Executes a deletion set using per-kind removers.

    Attributes:
        dry_run: If True, only check existence and report what would go.

    Example:
        >>> executor = Executor(get_removers(), dry_run=True)
        >>> outcome = executor.execute(plan.removable)
        >>> print(outcome.deleted, outcome.failed)
    """

    def __init__(
        self,
        removers: Iterable[Remover],
        *,
        dry_run: bool = False,
        on_result: Callable[[ItemResult], None] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            removers: Removers; at most one per candidate kind is used.
            dry_run: If True, nothing is removed.
            on_result: Optional callback invoked after each item.
        """
        self._removers: dict[CandidateKind, Remover] = {}
        for remover in removers:
            self._removers.setdefault(remover.kind, remover)
        self._dry_run = dry_run
        self._on_result = on_result

    @property
    def dry_run(self) -> bool:
        """Check if executor is in dry-run mode."""
        return self._dry_run

    def execute(self, deletion_set: Iterable[Candidate]) -> RunOutcome:
        """Remove every item of a deletion set.

        Candidates whose kind has no remover are returned as untouched
        warnings.

        Args:
            deletion_set: Reconciled candidates in execution order.

        Returns:
            RunOutcome with one result per handled item.
        """
        results: list[ItemResult] = []
        warnings: list[Candidate] = []

        for candidate in deletion_set:
            remover = self._removers.get(candidate.kind)
            if remover is None:
                logger.debug("No remover for %s, leaving %s", candidate.kind.value, candidate.label)
                warnings.append(candidate)
                continue

            result = self._process(remover, candidate)
            results.append(result)
            if self._on_result is not None:
                self._on_result(result)

        return RunOutcome(results=tuple(results), warnings=tuple(warnings))

    def _process(self, remover: Remover, candidate: Candidate) -> ItemResult:
        """Drive one item to its terminal state."""
        if not self._exists(remover, candidate):
            logger.info("Already gone: %s", candidate.label)
            return ItemResult(candidate, ItemState.GONE)

        if self._dry_run:
            return ItemResult(candidate, ItemState.DRY_RUN)

        try:
            remover.remove(candidate)
        except REMOVAL_ERRORS as e:
            logger.warning("Primary removal of %s failed (%s), trying fallback", candidate.label, e)
        else:
            logger.debug("Removed %s", candidate.label)
            return ItemResult(candidate, ItemState.DELETED_PRIMARY)

        try:
            remover.fallback_remove(candidate)
        except REMOVAL_ERRORS as e:
            logger.error("Failed to remove %s: %s", candidate.label, e)
            return ItemResult(candidate, ItemState.FAILED, error=str(e) or type(e).__name__)

        if self._exists(remover, candidate):
            error = "still present after fallback removal"
            logger.error("Failed to remove %s: %s", candidate.label, error)
            return ItemResult(candidate, ItemState.FAILED, error=error)

        logger.debug("Removed %s via fallback", candidate.label)
        return ItemResult(candidate, ItemState.DELETED_FALLBACK)

    @staticmethod
    def _exists(remover: Remover, candidate: Candidate) -> bool:
        try:
            return remover.exists(candidate)
        except (OSError, RemovalError) as e:
            logger.debug("Existence check for %s failed (%s), assuming present", candidate.label, e)
            return True
