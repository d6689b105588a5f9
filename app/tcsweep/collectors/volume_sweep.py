"""Full-volume sweep collector.

Walks every directory of every mounted volume and retains those whose
full path matches a vendor pattern. Volumes are scanned concurrently,
one task per volume, and merged in volume order once all tasks finish.
"""

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor

from tcsweep.backends.filesystem import FilesystemBackend, list_volumes
from tcsweep.collectors.base import Collector
from tcsweep.core.catalog import Catalog
from tcsweep.core.errors import CollectorSkip
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import SEPARATOR, Candidate, CandidateKind

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


def is_excluded(path: str, excludes: Iterable[str]) -> bool:
    """Check if ``path`` lies in (or is) one of the excluded subtrees.

    Comparison is case-insensitive on the path with a trailing separator
    appended, so ``C:\\Windows\\WinSxS`` itself is excluded but
    ``C:\\Windows\\WinSxSBackup`` is not.

    Args:
        path: Directory path to test.
        excludes: Volume-relative subtrees such as ``\\Windows\\WinSxS``.

    Returns:
        True if the path must not be yielded or descended into.
    """
    folded = path.casefold().replace("/", SEPARATOR).rstrip(SEPARATOR) + SEPARATOR
    for exclude in excludes:
        needle = exclude.casefold().replace("/", SEPARATOR).rstrip(SEPARATOR) + SEPARATOR
        if needle in folded:
            return True
    return False


class VolumeSweepCollector(Collector):
    """Opt-in collector that sweeps all mounted volumes.

    A failure on one volume is logged and that volume contributes
    nothing; the other volumes are unaffected.
    """

    def __init__(
        self,
        catalog: Catalog,
        matcher: PatternMatcher,
        filesystem: FilesystemBackend,
        volumes: list[str] | None = None,
    ) -> None:
        super().__init__(matcher)
        self._excludes = catalog.sweep_excludes
        self._fs = filesystem
        self._volumes = volumes

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.FILESYSTEM_PATH

    @property
    def name(self) -> str:
        return "volume-sweep"

    def is_excluded(self, path: str) -> bool:
        """Check ``path`` against the catalog sweep exclusions."""
        return is_excluded(path, self._excludes)

    def _iter_candidates(self) -> Iterator[Candidate]:
        volumes = self._volumes if self._volumes is not None else list_volumes()
        if not volumes:
            logger.info("No mounted volumes found")
            return

        logger.info("Sweeping %d volume(s): %s", len(volumes), ", ".join(volumes))
        workers = min(len(volumes), MAX_WORKERS)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sweep") as pool:
            futures = [pool.submit(self._sweep_volume, volume) for volume in volumes]

        # Leaving the executor block waits for every volume
        for volume, future in zip(volumes, futures, strict=True):
            try:
                yield from future.result()
            except CollectorSkip as e:
                self._skip(volume, e)
            except Exception:
                logger.warning("Sweep of %s failed", volume, exc_info=True)

    def _sweep_volume(self, root: str) -> list[Candidate]:
        """Walk one volume and return its matching directories.

        Args:
            root: Volume root such as ``D:\\``.

        Returns:
            Matching directories in walk order.
        """
        found: list[Candidate] = []
        for path in self._fs.iter_directories(root, self.is_excluded, prune=self.matcher.matches):
            if self.matcher.matches(path):
                found.append(self._candidate(path))
        logger.debug("Volume %s: %d match(es)", root, len(found))
        return found
