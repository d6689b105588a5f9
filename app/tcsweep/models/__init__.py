"""Data models for tcsweep.

This module exports the core data structures used throughout the application.
"""

from tcsweep.models.candidate import (
    Candidate,
    CandidateKind,
    CandidateSet,
    normalize_identifier,
)
from tcsweep.models.outcome import ItemResult, ItemState, RunOutcome
from tcsweep.models.report import ReportMetadata, ScanReport

__all__ = [
    "Candidate",
    "CandidateKind",
    "CandidateSet",
    "ItemResult",
    "ItemState",
    "ReportMetadata",
    "RunOutcome",
    "ScanReport",
    "normalize_identifier",
]
