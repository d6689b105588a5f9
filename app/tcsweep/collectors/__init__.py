"""Candidate collectors for the different artifact sources.

This module exports the collector classes used by the pipeline.
"""

from tcsweep.collectors.base import Collector
from tcsweep.collectors.environment import EnvironmentCollector
from tcsweep.collectors.known_paths import KnownPathCollector
from tcsweep.collectors.pattern_scan import PatternScanCollector
from tcsweep.collectors.registry import RegistryCollector
from tcsweep.collectors.services import ServiceCollector
from tcsweep.collectors.tasks import ScheduledTaskCollector
from tcsweep.collectors.volume_sweep import VolumeSweepCollector

__all__ = [
    "Collector",
    "EnvironmentCollector",
    "KnownPathCollector",
    "PatternScanCollector",
    "RegistryCollector",
    "ScheduledTaskCollector",
    "ServiceCollector",
    "VolumeSweepCollector",
]
