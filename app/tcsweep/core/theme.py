"""Rich theme for tcsweep output.

Colors come from the bundled ``data/theme.toml``. A ``theme.toml`` in
the user config dir may override any subset: base colors in its
``[colors]`` table, candidate-kind colors in its ``[kinds]`` table.
"""

import functools
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
)
from rich.theme import Theme

from tcsweep.core.paths import get_user_theme_path
from tcsweep.models.candidate import CandidateKind

logger = logging.getLogger(__name__)

HexColor = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$"),
]

DEFAULT_KIND_COLORS: dict[CandidateKind, str] = {
    CandidateKind.FILESYSTEM_PATH: "#69B9A1",
    CandidateKind.REGISTRY_KEY: "#0e8ac8",
    CandidateKind.SERVICE: "#d44ebc",
    CandidateKind.SCHEDULED_TASK: "#faf870",
    CandidateKind.ENV_VAR: "#c1ff62",
}


class ThemeColors(BaseModel):
    """Validated color set. Every color is a ``#RGB`` or ``#RRGGBB`` hex code."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"
    kinds: dict[CandidateKind, HexColor] = Field(default_factory=lambda: dict(DEFAULT_KIND_COLORS))

    @field_validator("kinds")
    @classmethod
    def fill_missing_kinds(cls, v: dict[CandidateKind, str]) -> dict[CandidateKind, str]:
        """Kinds without a configured color keep their default."""
        return {**DEFAULT_KIND_COLORS, **v}

    def styles(self) -> dict[str, str]:
        """Return the Rich style table used by the display helpers."""
        styles = {
            "text": self.text,
            "muted": self.muted,
            "dim": self.muted,
            "header": self.header,
            "bold_header": f"bold {self.header}",
            "border": self.border,
            "success": self.success,
            "warning": self.warning,
            "error": f"bold {self.error}",
            "info": self.info,
        }
        styles.update({f"kind.{kind.value}": color for kind, color in self.kinds.items()})
        return styles


def _read_tables(path: Path) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return the ``[colors]`` and ``[kinds]`` tables of a theme file.

    A missing or unreadable file contributes nothing.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}, {}
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}, {}

    tables = []
    for name in ("colors", "kinds"):
        table = data.get(name, {})
        if not isinstance(table, dict):
            logger.warning("Ignoring [%s] in %s: not a table", name, path)
            table = {}
        tables.append(table)
    return tables[0], tables[1]


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the bundled theme merged with the user's overrides.

    An override that fails validation is dropped as a whole and the
    bundled colors apply.

    Args:
        user_path: Override file. Defaults to the user config dir.

    Returns:
        Validated ThemeColors.
    """
    bundled = resources.files("tcsweep.data").joinpath("theme.toml")
    base_colors, base_kinds = _read_tables(Path(str(bundled)))
    user_colors, user_kinds = _read_tables(user_path or get_user_theme_path())

    try:
        return ThemeColors(**{**base_colors, **user_colors}, kinds={**base_kinds, **user_kinds})
    except (ValidationError, TypeError) as e:
        logger.warning("Invalid theme override, using bundled colors: %s", e)

    try:
        return ThemeColors(**base_colors, kinds=base_kinds)
    except (ValidationError, TypeError) as e:
        logger.error("Bundled theme is invalid, using defaults: %s", e)
        return ThemeColors()


@functools.cache
def get_theme() -> Theme:
    """Get the Rich theme, loaded once per process."""
    return Theme(load_theme().styles())
