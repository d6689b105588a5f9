"""Known-path collector.

Tests each fixed install, data and shortcut location from the catalog
for existence.
"""

import logging
from collections.abc import Iterator

from tcsweep.backends.filesystem import FilesystemBackend
from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.catalog import Catalog
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import Candidate, CandidateKind

logger = logging.getLogger(__name__)


class KnownPathCollector(Collector):
    """Collector for the catalog's fixed vendor locations.

    Known paths are vendor-owned by definition, so they are not run
    through the matcher.
    """

    def __init__(
        self,
        catalog: Catalog,
        matcher: PatternMatcher,
        filesystem: FilesystemBackend,
    ) -> None:
        super().__init__(matcher)
        self._paths = catalog.known_paths
        self._fs = filesystem

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.FILESYSTEM_PATH

    @property
    def name(self) -> str:
        return "known-paths"

    def _iter_candidates(self) -> Iterator[Candidate]:
        for path in self._paths:
            try:
                if not self._fs.exists(path):
                    logger.debug("Known path absent: %s", path)
                    continue
            except RECOVERABLE_ERRORS as e:
                self._skip(path, e)
                continue

            yield self._candidate(path, size_bytes=self._fs.size(path))
