"""Shallow pattern-scan collector.

Lists a bounded number of levels below well-known parent directories
(Program Files, ProgramData, profile folders, Desktop, Start Menu) and
retains entries whose leaf name matches a vendor pattern.
"""

import logging
from collections.abc import Iterator

from tcsweep.backends.filesystem import FilesystemBackend, FsEntry
from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.catalog import Catalog, EntryType, ScanTarget
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import Candidate, CandidateKind

logger = logging.getLogger(__name__)


class PatternScanCollector(Collector):
    """Collector for vendor-named entries below the catalog scan targets.

    Matched directories are not descended into; their contents are
    covered by the recursive delete of the directory itself.
    """

    def __init__(
        self,
        catalog: Catalog,
        matcher: PatternMatcher,
        filesystem: FilesystemBackend,
    ) -> None:
        super().__init__(matcher)
        self._targets = catalog.scan_targets
        self._fs = filesystem

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.FILESYSTEM_PATH

    @property
    def name(self) -> str:
        return "pattern-scan"

    def _iter_candidates(self) -> Iterator[Candidate]:
        for target in self._targets:
            try:
                yield from self._scan_target(target)
            except RECOVERABLE_ERRORS as e:
                self._skip(target.parent, e)

    def _scan_target(self, target: ScanTarget) -> Iterator[Candidate]:
        """Scan one target directory.

        Args:
            target: Parent, depth and entry type to scan.

        Yields:
            Candidates for matching entries.
        """

        def prune(entry: FsEntry) -> bool:
            return self.matcher.matches(entry.name)

        entries = self._fs.list_entries(
            target.parent,
            target.depth,
            entry_type=target.entry_type,
            prune=prune if target.entry_type == EntryType.DIRECTORIES else None,
        )
        for entry in entries:
            if self.matcher.matches(entry.name):
                yield self._candidate(entry.path, size_bytes=self._fs.size(entry.path))
