"""Reconciliation of collected candidates into minimal deletion sets.

Merges candidate sets from all collectors, removes duplicates and drops
any candidate whose ancestor is already retained. The result for each
kind is an antichain under the kind's hierarchy relation, so a recursive
delete of a parent never collides with a redundant delete of its child.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from tcsweep.models.candidate import SEPARATOR, Candidate, CandidateKind, CandidateSet


class HierarchyRelation(Protocol):
    """Parent/child ordering over candidate identifiers."""

    def is_descendant(self, candidate: Candidate, ancestor: Candidate) -> bool:
        """Return True if ``candidate`` lies strictly below ``ancestor``."""
        ...


class PrefixRelation:
    """Separator-aware path prefix relation.

    ``C:\\TwinCAT\\3.1`` descends from ``C:\\TwinCAT`` but
    ``C:\\TwinCAT2`` does not.
    """

    def __init__(self, separator: str = SEPARATOR) -> None:
        self._separator = separator

    def is_descendant(self, candidate: Candidate, ancestor: Candidate) -> bool:
        child = candidate.normalized
        parent = ancestor.normalized
        if child == parent:
            return False
        prefix = parent if parent.endswith(self._separator) else parent + self._separator
        return child.startswith(prefix)


class ExactRelation:
    """Flat relation for kinds without a hierarchy (dedup only)."""

    def is_descendant(self, candidate: Candidate, ancestor: Candidate) -> bool:
        return False


def relation_for(kind: CandidateKind) -> HierarchyRelation:
    """Return the hierarchy relation appropriate to ``kind``."""
    if kind.is_hierarchical:
        return PrefixRelation(SEPARATOR)
    return ExactRelation()


def _sort_key(candidate: Candidate) -> tuple[str, str, str]:
    return (
        candidate.normalized,
        (candidate.scope or "").casefold(),
        (candidate.variable or "").casefold(),
    )


def reconcile(
    candidate_sets: Iterable[Iterable[Candidate]],
    relation: HierarchyRelation | None = None,
) -> list[Candidate]:
    """Reduce candidate sets of a single kind to a minimal deletion set.

    Unions all inputs with deduplication by candidate key, sorts by
    normalized identifier and accepts a candidate only when it is not a
    descendant of an already-accepted one. Sorting visits ancestors
    before their descendants. Re-running on the output returns it
    unchanged.

    Args:
        candidate_sets: Candidate sets (or any iterables of candidates).
        relation: Hierarchy relation; defaults to the kind's relation.

    Returns:
        Sorted list of candidates forming an antichain.

    Raises:
        ValueError: If the inputs mix candidates of different kinds.
    """
    merged = CandidateSet()
    for candidates in candidate_sets:
        merged.update(candidates)

    kinds = merged.kinds
    if len(kinds) > 1:
        names = ", ".join(sorted(k.value for k in kinds))
        msg = f"Cannot reconcile mixed candidate kinds: {names}"
        raise ValueError(msg)
    if not kinds:
        return []

    if relation is None:
        relation = relation_for(next(iter(kinds)))

    accepted: list[Candidate] = []
    for candidate in sorted(merged, key=_sort_key):
        if any(relation.is_descendant(candidate, kept) for kept in accepted):
            continue
        accepted.append(candidate)

    return accepted


@dataclass(frozen=True, slots=True)
class DeletionPlan:
    """Reconciled deletion sets for every candidate kind.

    Attributes:
        filesystem: Filesystem paths to delete.
        registry: Registry keys to delete.
        environment: PATH segments and variables (separate confirmation).
        services: Services needing manual action.
        tasks: Scheduled tasks needing manual action.
    """

    filesystem: list[Candidate] = field(default_factory=list)
    registry: list[Candidate] = field(default_factory=list)
    environment: list[Candidate] = field(default_factory=list)
    services: list[Candidate] = field(default_factory=list)
    tasks: list[Candidate] = field(default_factory=list)

    @property
    def removable(self) -> list[Candidate]:
        """Return filesystem and registry items in execution order."""
        return [*self.filesystem, *self.registry]

    @property
    def warnings(self) -> list[Candidate]:
        """Return services and tasks that are reported but not removed."""
        return [*self.services, *self.tasks]

    @property
    def is_empty(self) -> bool:
        """Check if nothing at all was found."""
        return not (self.removable or self.environment or self.warnings)


def build_deletion_plan(candidate_sets: Iterable[Iterable[Candidate]]) -> DeletionPlan:
    """Partition candidates by kind and reconcile each partition.

    Args:
        candidate_sets: Candidate sets from all collectors.

    Returns:
        DeletionPlan holding one reconciled list per kind.
    """
    found = CandidateSet()
    for candidates in candidate_sets:
        found.update(candidates)

    return DeletionPlan(
        filesystem=reconcile([found.of_kind(CandidateKind.FILESYSTEM_PATH)]),
        registry=reconcile([found.of_kind(CandidateKind.REGISTRY_KEY)]),
        environment=reconcile([found.of_kind(CandidateKind.ENV_VAR)]),
        services=reconcile([found.of_kind(CandidateKind.SERVICE)]),
        tasks=reconcile([found.of_kind(CandidateKind.SCHEDULED_TASK)]),
    )
