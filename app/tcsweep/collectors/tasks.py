"""Scheduled-task collector.

Enumerates Task Scheduler entries with ``schtasks /Query /FO CSV /NH``
and retains those whose task path matches a vendor pattern.
"""

import csv
import logging
from collections.abc import Iterator

from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.errors import CollectorSkip
from tcsweep.models.candidate import Candidate, CandidateKind
from tcsweep.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


def parse_schtasks_csv(output: str) -> list[tuple[str, str | None]]:
    """Parse CSV output of ``schtasks /Query``.

    Header rows (repeated per task folder on some Windows builds) and
    informational lines are ignored. A task listed several times (once
    per trigger) appears once.

    Args:
        output: Standard output of ``schtasks /Query /FO CSV /NH``.

    Returns:
        List of ``(task path, status)`` tuples in output order.
    """
    tasks: list[tuple[str, str | None]] = []
    seen: set[str] = set()
    for row in csv.reader(output.splitlines()):
        if not row or not row[0].startswith("\\"):
            continue
        path = row[0].strip()
        if path.casefold() in seen:
            continue
        seen.add(path.casefold())
        status = row[2].strip() if len(row) > 2 and row[2].strip() else None
        tasks.append((path, status))
    return tasks


class ScheduledTaskCollector(Collector):
    """Collector for vendor scheduled tasks."""

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.SCHEDULED_TASK

    @property
    def name(self) -> str:
        return "scheduled-tasks"

    def is_available(self) -> bool:
        """Check if schtasks.exe is available."""
        return command_exists("schtasks")

    def _iter_candidates(self) -> Iterator[Candidate]:
        try:
            tasks = self._query()
        except RECOVERABLE_ERRORS as e:
            self._skip("task list", e)
            return

        for path, status in tasks:
            if self.matcher.matches(path):
                yield self._candidate(path, detail=status)

    def _query(self) -> list[tuple[str, str | None]]:
        result = run_command(["schtasks", "/Query", "/FO", "CSV", "/NH"])
        if not result.success:
            raise CollectorSkip(f"schtasks failed: {result.message}")
        return parse_schtasks_csv(result.stdout)
