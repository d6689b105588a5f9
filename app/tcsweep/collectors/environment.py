"""Environment collector.

Reads the persistent Machine and User environments. Matching ``Path``
segments are reported individually; any other variable is reported as
a whole when its name or value matches.
"""

import logging
from collections.abc import Iterator

from tcsweep.backends.environment import (
    PATH_VARIABLE,
    EnvironmentBackend,
    EnvScope,
    split_path_value,
)
from tcsweep.collectors.base import RECOVERABLE_ERRORS, Collector
from tcsweep.core.matcher import PatternMatcher
from tcsweep.models.candidate import Candidate, CandidateKind

logger = logging.getLogger(__name__)


class EnvironmentCollector(Collector):
    """Collector for vendor PATH segments and environment variables."""

    def __init__(
        self,
        matcher: PatternMatcher,
        backend: EnvironmentBackend,
        scopes: tuple[EnvScope, ...] = (EnvScope.MACHINE, EnvScope.USER),
    ) -> None:
        super().__init__(matcher)
        self._backend = backend
        self._scopes = scopes

    @property
    def kind(self) -> CandidateKind:
        return CandidateKind.ENV_VAR

    @property
    def name(self) -> str:
        return "environment"

    def is_available(self) -> bool:
        """Check if the environment backend can be used."""
        return self._backend.is_available()

    def _iter_candidates(self) -> Iterator[Candidate]:
        for scope in self._scopes:
            try:
                variables = self._backend.read_scope(scope)
            except RECOVERABLE_ERRORS as e:
                self._skip(f"{scope.value} environment", e)
                continue

            for name, value in variables.items():
                if name.casefold() == PATH_VARIABLE.casefold():
                    for segment in split_path_value(value):
                        if self.matcher.matches(segment):
                            yield self._candidate(segment.strip(), scope=scope.value, variable=name)
                elif self.matcher.matches(name) or self.matcher.matches(value):
                    yield self._candidate(name, scope=scope.value, detail=value)
