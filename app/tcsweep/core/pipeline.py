"""Collector and remover factories.

Wires the catalog, the shared matcher and the OS backends into the
collectors and removers used by the CLI commands.
"""

import logging
from collections.abc import Iterable

from tcsweep.backends.environment import (
    EnvironmentBackend,
    RegExeEnvironmentBackend,
    WinregEnvironmentBackend,
)
from tcsweep.backends.filesystem import NativeFilesystemBackend, ShellFilesystemBackend
from tcsweep.backends.registry import RegExeBackend, RegistryBackend, WinregBackend
from tcsweep.collectors.base import Collector
from tcsweep.collectors.environment import EnvironmentCollector
from tcsweep.collectors.known_paths import KnownPathCollector
from tcsweep.collectors.pattern_scan import PatternScanCollector
from tcsweep.collectors.registry import RegistryCollector
from tcsweep.collectors.services import ServiceCollector
from tcsweep.collectors.tasks import ScheduledTaskCollector
from tcsweep.collectors.volume_sweep import VolumeSweepCollector
from tcsweep.core.catalog import Catalog
from tcsweep.core.matcher import PatternMatcher
from tcsweep.core.removers import EnvironmentRemover, FilesystemRemover, RegistryRemover, Remover
from tcsweep.models.candidate import CandidateSet

logger = logging.getLogger(__name__)


def _registry_backend() -> RegistryBackend:
    """Prefer the native registry API, falling back to reg.exe."""
    native = WinregBackend()
    return native if native.is_available() else RegExeBackend()


def _environment_backend() -> EnvironmentBackend:
    """Prefer the native registry API, falling back to reg.exe."""
    native = WinregEnvironmentBackend()
    return native if native.is_available() else RegExeEnvironmentBackend()


def get_collectors(catalog: Catalog, matcher: PatternMatcher) -> list[Collector]:
    """Get the standard collectors (everything except the volume sweep).

    Args:
        catalog: Loaded vendor catalog.
        matcher: Shared pattern matcher.

    Returns:
        Collectors in reporting order.
    """
    filesystem = NativeFilesystemBackend()
    return [
        KnownPathCollector(catalog, matcher, filesystem),
        PatternScanCollector(catalog, matcher, filesystem),
        ServiceCollector(matcher),
        ScheduledTaskCollector(matcher),
        EnvironmentCollector(matcher, _environment_backend()),
        RegistryCollector(catalog, matcher, _registry_backend()),
    ]


def get_available_collectors(catalog: Catalog, matcher: PatternMatcher) -> list[Collector]:
    """Get standard collectors that can run on this system.

    Wraps :func:`get_collectors` and filters out collectors whose
    underlying source is unavailable.

    Args:
        catalog: Loaded vendor catalog.
        matcher: Shared pattern matcher.

    Returns:
        List of available collectors.
    """
    available: list[Collector] = []
    for collector in get_collectors(catalog, matcher):
        if collector.is_available():
            available.append(collector)
        else:
            logger.info("Collector %s is not available on this system", collector.name)
    return available


def get_sweep_collector(catalog: Catalog, matcher: PatternMatcher) -> VolumeSweepCollector:
    """Get the opt-in full-volume sweep collector."""
    return VolumeSweepCollector(catalog, matcher, NativeFilesystemBackend())


def run_collectors(collectors: Iterable[Collector]) -> list[CandidateSet]:
    """Run collectors in order and return their candidate sets.

    Args:
        collectors: Collectors to run.

    Returns:
        One CandidateSet per collector, in the same order.
    """
    results: list[CandidateSet] = []
    for collector in collectors:
        logger.debug("Running collector %s", collector.name)
        results.append(collector.collect())
    return results


def get_removers() -> list[Remover]:
    """Get removers pairing each native mechanism with its shell fallback.

    Returns:
        Removers for filesystem paths, registry keys and environment entries.
    """
    return [
        FilesystemRemover(NativeFilesystemBackend(), ShellFilesystemBackend()),
        RegistryRemover(WinregBackend(), RegExeBackend()),
        EnvironmentRemover(WinregEnvironmentBackend(), RegExeEnvironmentBackend()),
    ]
