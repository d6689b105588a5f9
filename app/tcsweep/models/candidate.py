"""Candidate models for discovered vendor artifacts.

A candidate is a single artifact (path, registry key, service, scheduled
task or environment entry) suspected to belong to the target vendor.
Candidates are collected into insertion-ordered sets that deduplicate
case-insensitively by identifier.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

SEPARATOR = "\\"

_DRIVE_ROOT = re.compile(r"^[a-z]:\\$")


class CandidateKind(str, Enum):
    """Kind of a discovered artifact.

    Attributes:
        FILESYSTEM_PATH: File or directory on a mounted volume.
        REGISTRY_KEY: Registry key including its hive prefix.
        SERVICE: Registered Windows service.
        SCHEDULED_TASK: Task Scheduler entry.
        ENV_VAR: PATH segment or standalone environment variable.
    """

    FILESYSTEM_PATH = "filesystem"
    REGISTRY_KEY = "registry"
    SERVICE = "service"
    SCHEDULED_TASK = "task"
    ENV_VAR = "environment"

    @property
    def is_hierarchical(self) -> bool:
        """Check if identifiers of this kind form a parent/child hierarchy."""
        return self in (CandidateKind.FILESYSTEM_PATH, CandidateKind.REGISTRY_KEY)


def normalize_identifier(identifier: str, kind: CandidateKind) -> str:
    """Normalize an identifier for case-insensitive comparison.

    Case-folds the identifier and strips trailing separators. Filesystem
    paths additionally have forward slashes folded into backslashes. A
    bare drive root such as ``C:\\`` keeps its separator.

    Args:
        identifier: Raw identifier text.
        kind: Kind of the candidate the identifier belongs to.

    Returns:
        Normalized identifier string.
    """
    text = identifier.strip().casefold()
    if kind in (CandidateKind.FILESYSTEM_PATH, CandidateKind.ENV_VAR):
        text = text.replace("/", SEPARATOR)
    while len(text) > 1 and text.endswith(SEPARATOR) and not _DRIVE_ROOT.match(text):
        text = text[:-1]
    return text


@dataclass(frozen=True, slots=True)
class Candidate:
    """Represents a single artifact discovered by a collector.

    Attributes:
        kind: Kind of artifact.
        identifier: Hierarchical identifier (path, key path, service name,
            task path, PATH segment or variable name).
        scope: Environment scope ("Machine" or "User") for env entries.
        variable: Variable the identifier is a segment of (e.g. "Path"),
            None when the identifier names a whole variable.
        detail: Human-readable extra information (display name, value).
        size_bytes: Aggregate size for filesystem entries, if known.
        source: Name of the collector that produced this candidate.
    """

    kind: CandidateKind
    identifier: str
    scope: str | None = None
    variable: str | None = None
    detail: str | None = field(default=None, compare=False)
    size_bytes: int | None = field(default=None, compare=False)
    source: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate candidate data after initialization."""
        if not self.identifier or not self.identifier.strip():
            msg = "Candidate identifier cannot be empty"
            raise ValueError(msg)

    @property
    def normalized(self) -> str:
        """Return the normalized identifier used for comparisons."""
        return normalize_identifier(self.identifier, self.kind)

    @property
    def key(self) -> tuple[str, str, str, str]:
        """Return the deduplication key of this candidate."""
        return (
            self.kind.value,
            (self.scope or "").casefold(),
            (self.variable or "").casefold(),
            self.normalized,
        )

    @property
    def is_path_segment(self) -> bool:
        """Check if this is a segment of a list-valued variable such as PATH."""
        return self.kind == CandidateKind.ENV_VAR and self.variable is not None

    @property
    def label(self) -> str:
        """Return a display label that includes scope information."""
        if self.kind != CandidateKind.ENV_VAR:
            return self.identifier
        if self.variable is not None:
            return f"[{self.scope}] {self.variable}: {self.identifier}"
        return f"[{self.scope}] {self.identifier}"

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        if self.size_bytes is None:
            return "-"

        size = float(self.size_bytes)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024:
                return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
            size /= 1024
        return f"{size:.1f} TB"


class CandidateSet:
    """Insertion-ordered set of candidates deduplicated by key.

    The first candidate added for a key wins; later duplicates are
    ignored. Iteration yields candidates in insertion order.
    """

    def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
        self._items: dict[tuple[str, str, str, str], Candidate] = {}
        self.update(candidates)

    def add(self, candidate: Candidate) -> bool:
        """Add a candidate unless an equivalent one is already present.

        Args:
            candidate: Candidate to add.

        Returns:
            True if the candidate was added, False if it was a duplicate.
        """
        key = candidate.key
        if key in self._items:
            return False
        self._items[key] = candidate
        return True

    def update(self, candidates: Iterable[Candidate]) -> int:
        """Add several candidates and return how many were new."""
        return sum(1 for candidate in candidates if self.add(candidate))

    def of_kind(self, kind: CandidateKind) -> "CandidateSet":
        """Return a new set holding only candidates of ``kind``."""
        return CandidateSet(c for c in self if c.kind == kind)

    @property
    def kinds(self) -> set[CandidateKind]:
        """Return the set of kinds present."""
        return {c.kind for c in self}

    def __contains__(self, candidate: object) -> bool:
        if not isinstance(candidate, Candidate):
            return False
        return candidate.key in self._items

    def __iter__(self) -> Iterator[Candidate]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"CandidateSet({list(self._items.values())!r})"
