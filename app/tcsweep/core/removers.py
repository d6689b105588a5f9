"""Per-kind removal mechanisms.

Each remover pairs a primary mechanism (native API) with a fallback
mechanism (command-line utility) for one candidate kind. Removers only
perform removals; sequencing and bookkeeping live in the executor.
"""

import logging
from abc import ABC, abstractmethod

from tcsweep.backends.environment import (
    EnvironmentBackend,
    EnvScope,
    remove_segment,
    split_path_value,
)
from tcsweep.backends.filesystem import FilesystemBackend
from tcsweep.backends.registry import RegistryBackend
from tcsweep.core.errors import CollectorSkip, RemovalError
from tcsweep.models.candidate import Candidate, CandidateKind, normalize_identifier

logger = logging.getLogger(__name__)


class Remover(ABC):
    """Abstract base class for removal mechanisms of one candidate kind."""

    @property
    @abstractmethod
    def kind(self) -> CandidateKind:
        """Return the candidate kind this remover handles."""

    @abstractmethod
    def exists(self, candidate: Candidate) -> bool:
        """Check if the artifact is still present."""

    @abstractmethod
    def remove(self, candidate: Candidate) -> None:
        """Remove the artifact with the primary mechanism.

        Raises:
            OSError: If the native API rejects the removal.
            RemovalError: If the mechanism reports failure.
        """

    @abstractmethod
    def fallback_remove(self, candidate: Candidate) -> None:
        """Remove the artifact with the fallback mechanism.

        Raises:
            OSError: If the utility cannot be started.
            RemovalError: If the utility reports failure.
            subprocess.SubprocessError: If the utility times out.
        """


class FilesystemRemover(Remover):
    """Removes files and directory trees."""

    def __init__(self, primary: FilesystemBackend, fallback: FilesystemBackend) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.FILESYSTEM_PATH

    def exists(self, candidate: Candidate) -> bool:
        return self._primary.exists(candidate.identifier)

    def remove(self, candidate: Candidate) -> None:
        self._primary.remove(candidate.identifier)

    def fallback_remove(self, candidate: Candidate) -> None:
        self._fallback.remove(candidate.identifier)


class RegistryRemover(Remover):
    """Removes registry keys including all subkeys."""

    def __init__(self, primary: RegistryBackend, fallback: RegistryBackend) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.REGISTRY_KEY

    def exists(self, candidate: Candidate) -> bool:
        return self._primary.key_exists(candidate.identifier)

    def remove(self, candidate: Candidate) -> None:
        self._primary.delete_key(candidate.identifier)

    def fallback_remove(self, candidate: Candidate) -> None:
        self._fallback.delete_key(candidate.identifier)


class EnvironmentRemover(Remover):
    """Removes PATH segments and standalone environment variables.

    A PATH segment is removed by rewriting the variable without it; a
    standalone variable is deleted outright.
    """

    def __init__(self, primary: EnvironmentBackend, fallback: EnvironmentBackend) -> None:
        self._primary = primary
        self._fallback = fallback

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.ENV_VAR

    def exists(self, candidate: Candidate) -> bool:
        try:
            variables = self._primary.read_scope(self._scope(candidate))
        except CollectorSkip as e:
            # Unknown; let the removal attempt report the real problem
            logger.debug("Cannot check %s: %s", candidate.label, e)
            return True

        if not candidate.is_path_segment:
            return _lookup(variables, candidate.identifier) is not None

        found = _lookup(variables, candidate.variable or "")
        if found is None:
            return False
        target = candidate.normalized
        return any(
            normalize_identifier(segment, CandidateKind.ENV_VAR) == target
            for segment in split_path_value(found[1])
        )

    def remove(self, candidate: Candidate) -> None:
        self._remove_with(self._primary, candidate)

    def fallback_remove(self, candidate: Candidate) -> None:
        self._remove_with(self._fallback, candidate)

    def _remove_with(self, backend: EnvironmentBackend, candidate: Candidate) -> None:
        scope = self._scope(candidate)
        try:
            variables = backend.read_scope(scope)
        except CollectorSkip as e:
            raise RemovalError(str(e)) from e

        if not candidate.is_path_segment:
            found = _lookup(variables, candidate.identifier)
            backend.delete_value(scope, found[0] if found else candidate.identifier)
            return

        found = _lookup(variables, candidate.variable or "")
        if found is None:
            msg = f"{candidate.variable} is not defined in the {scope.value} environment"
            raise RemovalError(msg)
        name, value = found
        backend.set_value(scope, name, remove_segment(value, candidate.identifier))

    @staticmethod
    def _scope(candidate: Candidate) -> EnvScope:
        try:
            return EnvScope(candidate.scope)
        except ValueError:
            raise RemovalError(f"Unknown environment scope: {candidate.scope}") from None


def _lookup(variables: dict[str, str], name: str) -> tuple[str, str] | None:
    """Find a variable case-insensitively, returning its stored name and value."""
    folded = name.casefold()
    for key, value in variables.items():
        if key.casefold() == folded:
            return key, value
    return None
