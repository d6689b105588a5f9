"""Vendor catalog: patterns, known locations and search roots.

The catalog is an immutable configuration value constructed once at
startup from the bundled ``data/catalog.toml`` and passed explicitly to
the matcher and every collector.
"""

import logging
import os
import re
import tomllib
from collections.abc import Mapping
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tcsweep.core.errors import CatalogError

logger = logging.getLogger(__name__)

_ENV_PLACEHOLDER = re.compile(r"%([^%\\/]+)%")


class EntryType(str, Enum):
    """Entry-type filter for pattern scans."""

    FILES = "files"
    DIRECTORIES = "directories"


class ScanTarget(BaseModel):
    """A shallow pattern-scan target.

    Attributes:
        parent: Directory whose descendants are listed.
        depth: Levels below ``parent`` to list (1 = immediate children).
        entry_type: Whether to retain files or directories.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    parent: Annotated[str, Field(min_length=1, description="Directory to list")]
    depth: Annotated[int, Field(ge=1, le=8, description="Recursion depth (1-8)")] = 1
    entry_type: Annotated[
        EntryType,
        Field(description="Retain files or directories"),
    ] = EntryType.DIRECTORIES


class Catalog(BaseModel):
    """Fixed tables describing one vendor's product family.

    Attributes:
        patterns: Vendor identity tokens for the pattern matcher.
        known_paths: Absolute paths tested for existence.
        scan_targets: Shallow pattern-scan targets.
        sweep_excludes: Subtrees the full-volume sweep never enters.
        registry_roots: Roots searched recursively by key name.
        uninstall_roots: Uninstall subtrees searched by display-name value.
        uninstall_value: Value name compared during uninstall searches.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    patterns: Annotated[tuple[str, ...], Field(min_length=1)]
    known_paths: tuple[str, ...] = ()
    scan_targets: tuple[ScanTarget, ...] = ()
    sweep_excludes: tuple[str, ...] = ()
    registry_roots: tuple[str, ...] = ()
    uninstall_roots: tuple[str, ...] = ()
    uninstall_value: Annotated[str, Field(min_length=1)] = "DisplayName"

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject blank tokens; at least one real token must remain."""
        tokens = tuple(p.strip() for p in v if p.strip())
        if not tokens:
            msg = "patterns must contain at least one non-blank token"
            raise ValueError(msg)
        return tokens

    def expanded(self, environ: Mapping[str, str] | None = None) -> "Catalog":
        """Return a copy with ``%VAR%`` placeholders expanded.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.

        Returns:
            New Catalog with expanded paths.
        """
        source = os.environ if environ is None else environ
        env = {k.casefold(): v for k, v in source.items()}
        return self.model_copy(
            update={
                "known_paths": tuple(expand_placeholders(p, env) for p in self.known_paths),
                "scan_targets": tuple(
                    t.model_copy(update={"parent": expand_placeholders(t.parent, env)})
                    for t in self.scan_targets
                ),
            }
        )


def expand_placeholders(value: str, env: Mapping[str, str]) -> str:
    """Expand Windows-style ``%VAR%`` placeholders.

    Lookups are case-insensitive; ``env`` keys must already be
    case-folded. Unknown variables are left untouched.

    Args:
        value: Text containing placeholders.
        env: Case-folded environment mapping.

    Returns:
        Expanded text.
    """

    def _replace(match: re.Match[str]) -> str:
        resolved = env.get(match.group(1).casefold())
        if resolved is None:
            logger.debug("Undefined catalog variable %s in %s", match.group(0), value)
            return match.group(0)
        return resolved

    return _ENV_PLACEHOLDER.sub(_replace, value)


def get_bundled_catalog_path() -> Path:
    """Get the bundled catalog path.

    Returns:
        Path to the bundled data/catalog.toml
    """
    return resources.files("tcsweep.data").joinpath("catalog.toml")  # type: ignore[return-value]


def load_catalog(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Catalog:
    """Load, validate and expand the vendor catalog.

    Args:
        path: Catalog file. Defaults to the bundled catalog.
        environ: Environment used for placeholder expansion.

    Returns:
        Validated Catalog with placeholders expanded.

    Raises:
        CatalogError: If the file is missing, malformed, or invalid.
    """
    catalog_path = path or get_bundled_catalog_path()

    try:
        with open(catalog_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog not found: {catalog_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise CatalogError(f"Invalid TOML syntax in catalog: {e}") from e
    except OSError as e:
        raise CatalogError(f"Failed to read catalog: {e}") from e

    try:
        catalog = Catalog.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog: {e}") from e

    logger.debug(
        "Loaded catalog from %s (%d patterns, %d known paths, %d scan targets)",
        catalog_path,
        len(catalog.patterns),
        len(catalog.known_paths),
        len(catalog.scan_targets),
    )
    return catalog.expanded(environ)
