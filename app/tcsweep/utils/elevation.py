"""Administrative privilege detection.

Removing machine-wide install directories, HKLM keys and machine
environment variables requires an elevated process token.
"""

import ctypes
import logging
import os

from tcsweep.core.errors import SetupError

logger = logging.getLogger(__name__)


def is_admin() -> bool:
    """Determine whether the current process has administrative rights.

    On Windows this asks the shell (``IsUserAnAdmin``); elsewhere it
    checks for an effective UID of 0.

    Returns:
        True if the process is elevated.
    """
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError) as e:
            logger.debug("IsUserAnAdmin unavailable: %s", e)
            return False

    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def require_admin() -> None:
    """Abort unless the process is elevated.

    Raises:
        SetupError: If the process lacks administrative rights.
    """
    if not is_admin():
        msg = "Administrator privileges are required. Re-run from an elevated prompt."
        raise SetupError(msg)
