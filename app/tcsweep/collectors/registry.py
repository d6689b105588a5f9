"""Registry collector.

Searches the catalog registry roots for keys named after the vendor and
the uninstall subtrees for entries whose display name matches. The
shared PatternMatcher decides every match; a root that cannot be read
is skipped as a whole.
"""

import logging
from collections.abc import Iterator

from tcsweep.backends.registry import RegistryBackend
from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.catalog import Catalog
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import Candidate, CandidateKind

logger = logging.getLogger(__name__)


class RegistryCollector(Collector):
    """Collector for vendor registry keys and uninstall registrations."""

    def __init__(
        self,
        catalog: Catalog,
        matcher: PatternMatcher,
        backend: RegistryBackend,
    ) -> None:
        super().__init__(matcher)
        self._roots = catalog.registry_roots
        self._uninstall_roots = catalog.uninstall_roots
        self._uninstall_value = catalog.uninstall_value
        self._backend = backend

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.REGISTRY_KEY

    @property
    def name(self) -> str:
        return "registry"

    def is_available(self) -> bool:
        """Check if the registry backend can be used."""
        return self._backend.is_available()

    def _iter_candidates(self) -> Iterator[Candidate]:
        matches = self.matcher.matches
        terms = self.matcher.patterns

        for root in self._roots:
            try:
                for key in self._backend.search_keys(root, matches, terms):
                    yield self._candidate(key)
            except RECOVERABLE_ERRORS as e:
                self._skip(root, e)

        for root in self._uninstall_roots:
            try:
                for key, display in self._backend.search_uninstall(
                    root, matches, terms, self._uninstall_value
                ):
                    yield self._candidate(key, detail=display)
            except RECOVERABLE_ERRORS as e:
                self._skip(root, e)
