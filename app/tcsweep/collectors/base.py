"""Abstract base class for candidate collectors.

This module defines the Collector interface that every artifact source
(filesystem locations, registry, services, scheduled tasks, environment)
implements.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterator

from tcsweep.core.errors import CollectorSkip
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import Candidate, CandidateKind, CandidateSet

logger = logging.getLogger(__name__)

# Conditions that skip one target without aborting the collector
RECOVERABLE_ERRORS: tuple[type[BaseException], ...] = (
    CollectorSkip,
    OSError,
    subprocess.SubprocessError,
)


class Collector(ABC):
    """Abstract base class for all candidate collectors.

    Collectors query one source of artifacts and return every entry the
    shared matcher attributes to the vendor. A problem with a single
    target (missing directory, access denied, failing utility) is logged
    and skipped; collection continues with the next target.

    Example:
        >>> collector = KnownPathCollector(catalog, matcher, NativeFilesystemBackend())
        >>> if collector.is_available():
        ...     for candidate in collector.collect():
        ...         print(candidate.label)
    """

    def __init__(self, matcher: PatternMatcher) -> None:
        self._matcher = matcher

    @property
    def matcher(self) -> PatternMatcher:
        """Return the shared pattern matcher."""
        return self._matcher

    @property
    @abstractmethod
    def kind(self) -> CandidateKind:
        """Return the kind of candidate this collector produces."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short collector name used in logs and reports."""

    @abstractmethod
    def _iter_candidates(self) -> Iterator[Candidate]:
        """Yield candidates, handling per-target errors internally."""

    def is_available(self) -> bool:
        """Check if this collector can run on the current system.

        Returns:
            True if the underlying source can be queried.
        """
        return True

    def collect(self) -> CandidateSet:
        """Collect matching candidates from this source.

        Returns:
            CandidateSet in discovery order; empty if the collector is
            unavailable or nothing matched.
        """
        if not self.is_available():
            logger.info("Collector %s is not available on this system", self.name)
            return CandidateSet()

        found = CandidateSet(self._iter_candidates())
        logger.debug("Collector %s found %d candidate(s)", self.name, len(found))
        return found

    def _candidate(
        self,
        identifier: str,
        *,
        scope: str | None = None,
        variable: str | None = None,
        detail: str | None = None,
        size_bytes: int | None = None,
    ) -> Candidate:
        """Build a candidate of this collector's kind."""
        return Candidate(
            kind=self.kind,
            identifier=identifier,
            scope=scope,
            variable=variable,
            detail=detail,
            size_bytes=size_bytes,
            source=self.name,
        )

    def _skip(self, target: str, error: BaseException) -> None:
        """Log a recoverable per-target problem."""
        logger.info("%s: skipping %s: %s", self.name, target, error)
