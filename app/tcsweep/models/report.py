"""Scan report model for JSON export.

This module defines the data structure for exporting findings and the
reconciled deletion plan to JSON with metadata.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tcsweep.models.candidate import Candidate, CandidateKind

if TYPE_CHECKING:
    from tcsweep.core.reconcile import DeletionPlan


@dataclass(frozen=True, slots=True)
class ReportMetadata:
    """Metadata for a scan report.

    Attributes:
        timestamp: ISO format timestamp when the scan was performed.
        hostname: Name of the machine that was scanned.
        tcsweep_version: Version of tcsweep that performed the scan.
        collectors: Names of the collectors that ran.
        sweep: Whether the full-volume sweep was included.
    """

    timestamp: str
    hostname: str
    tcsweep_version: str
    collectors: tuple[str, ...]
    sweep: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "hostname": self.hostname,
            "tcsweep_version": self.tcsweep_version,
            "collectors": list(self.collectors),
            "sweep": self.sweep,
        }


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Complete scan report for export.

    Attributes:
        metadata: Report metadata including timestamp and hostname.
        candidates: Every candidate found, in discovery order.
        plan: Reconciled items per kind.
        summary: Candidate counts per kind.
    """

    metadata: ReportMetadata
    candidates: list[Candidate]
    plan: dict[str, list[Candidate]]
    summary: dict[str, int] = field(default_factory=lambda: {})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metadata": self.metadata.to_dict(),
            "candidates": [candidate_to_dict(c) for c in self.candidates],
            "plan": {kind: [c.label for c in items] for kind, items in self.plan.items()},
            "summary": self.summary,
        }

    @classmethod
    def create(
        cls,
        candidates: Iterable[Candidate],
        plan: DeletionPlan,
        collectors: list[str],
        sweep: bool = False,
    ) -> ScanReport:
        """Create a ScanReport with auto-generated metadata.

        Args:
            candidates: Candidates found by all collectors.
            plan: Reconciled deletion plan.
            collectors: Names of the collectors that ran.
            sweep: Whether the full-volume sweep was included.

        Returns:
            ScanReport with populated metadata and summary.
        """
        import socket

        from tcsweep import __version__

        found = list(candidates)
        summary: dict[str, int] = {kind.value: 0 for kind in CandidateKind}
        for candidate in found:
            summary[candidate.kind.value] += 1
        summary["total"] = len(found)
        summary["planned"] = len(plan.removable) + len(plan.environment)

        metadata = ReportMetadata(
            timestamp=datetime.now(UTC).isoformat(),
            hostname=socket.gethostname(),
            tcsweep_version=__version__,
            collectors=tuple(collectors),
            sweep=sweep,
        )
        by_kind = {
            CandidateKind.FILESYSTEM_PATH.value: plan.filesystem,
            CandidateKind.REGISTRY_KEY.value: plan.registry,
            CandidateKind.ENV_VAR.value: plan.environment,
            CandidateKind.SERVICE.value: plan.services,
            CandidateKind.SCHEDULED_TASK.value: plan.tasks,
        }
        return cls(metadata=metadata, candidates=found, plan=by_kind, summary=summary)


def candidate_to_dict(candidate: Candidate) -> dict[str, Any]:
    """Convert a Candidate to a dictionary.

    Args:
        candidate: The candidate to convert.

    Returns:
        Dictionary representation of the candidate.
    """
    return {
        "kind": candidate.kind.value,
        "identifier": candidate.identifier,
        "scope": candidate.scope,
        "variable": candidate.variable,
        "detail": candidate.detail,
        "size_bytes": candidate.size_bytes,
        "source": candidate.source,
    }
