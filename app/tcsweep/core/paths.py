"""Per-user configuration paths for tcsweep.

On Windows configuration lives below ``%APPDATA%``; elsewhere the XDG
Base Directory Specification applies:

- Windows: %APPDATA%\\tcsweep\\
- Other: $XDG_CONFIG_HOME/tcsweep/ or ~/.config/tcsweep/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "tcsweep"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to the per-user tcsweep configuration directory.
    """
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME

    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to theme.toml in the configuration directory.
    """
    return get_config_dir() / "theme.toml"
