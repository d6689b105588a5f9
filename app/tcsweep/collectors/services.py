"""Service collector.

Enumerates Win32 services and kernel drivers with ``sc query`` and
retains those whose service name or display name matches a vendor
pattern. Services are reported only; the user stops and deletes them.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.errors import CollectorSkip
from tcsweep.models.candidate import Candidate, CandidateKind
from tcsweep.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# sc.exe truncates the listing at its default 4 KiB enumeration buffer
_SC_BUFSIZE = "65536"


@dataclass(frozen=True, slots=True)
class ServiceEntry:
    """A service parsed from ``sc query`` output."""

    name: str
    display_name: str | None = None
    state: str | None = None


def parse_sc_query(output: str) -> list[ServiceEntry]:
    """Parse the output of ``sc query``.

    Args:
        output: Standard output of ``sc query``.

    Returns:
        Services in output order.
    """
    entries: list[ServiceEntry] = []
    name: str | None = None
    display: str | None = None
    state: str | None = None

    def flush() -> None:
        if name:
            entries.append(ServiceEntry(name=name, display_name=display, state=state))

    for line in output.splitlines():
        field, sep, value = line.strip().partition(":")
        if not sep:
            continue
        field = field.strip().upper()
        value = value.strip()
        if field == "SERVICE_NAME":
            flush()
            name, display, state = value, None, None
        elif field == "DISPLAY_NAME":
            display = value or None
        elif field == "STATE":
            # "4  RUNNING" -> "RUNNING"
            state = value.split()[-1] if value.split() else None
    flush()
    return entries


class ServiceCollector(Collector):
    """Collector for vendor services and drivers."""

    _SERVICE_TYPES: tuple[str, ...] = ("service", "driver")

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.SERVICE

    @property
    def name(self) -> str:
        return "services"

    def is_available(self) -> bool:
        """Check if sc.exe is available."""
        return command_exists("sc")

    def _iter_candidates(self) -> Iterator[Candidate]:
        for service_type in self._SERVICE_TYPES:
            try:
                entries = self._query(service_type)
            except RECOVERABLE_ERRORS as e:
                self._skip(f"{service_type} list", e)
                continue

            for entry in entries:
                if self.matcher.matches(entry.name) or self.matcher.matches(entry.display_name):
                    yield self._candidate(entry.name, detail=entry.display_name)

    def _query(self, service_type: str) -> list[ServiceEntry]:
        result = run_command(
            ["sc", "query", "type=", service_type, "state=", "all", "bufsize=", _SC_BUFSIZE]
        )
        if not result.success:
            raise CollectorSkip(f"sc query failed: {result.message}")
        return parse_sc_query(result.stdout)
