"""Persistent environment variable backends.

Machine and User environment variables live in the registry. Values are
read and written raw (``%VAR%`` references stay unexpanded) so that
rewriting ``Path`` without one segment never bakes expanded paths into
the stored value.
"""

import ctypes
import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from tcsweep.backends.registry import RegValue, parse_reg_query, split_key_path
from tcsweep.core.errors import CollectorSkip, RemovalError
from tcsweep.models.candidate import CandidateKind, normalize_identifier
from tcsweep.utils.shell import command_exists, run_command

try:
    import winreg
except ImportError:  # pragma: no cover - non-Windows platforms
    winreg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

PATH_VARIABLE = "Path"
PATH_DELIMITER = ";"

_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002


class EnvScope(str, Enum):
    """Persistent environment scope."""

    MACHINE = "Machine"
    USER = "User"


SCOPE_KEYS: dict[EnvScope, str] = {
    EnvScope.MACHINE: r"HKLM\SYSTEM\CurrentControlSet\Control\Session Manager\Environment",
    EnvScope.USER: r"HKCU\Environment",
}


def split_path_value(value: str) -> list[str]:
    """Split a ``;``-delimited list value into its non-empty segments."""
    return [segment for segment in value.split(PATH_DELIMITER) if segment.strip()]


def remove_segment(value: str, segment: str) -> str:
    """Return ``value`` with every occurrence of ``segment`` removed.

    Segments are compared case-insensitively, ignoring trailing
    separators. Empty segments are dropped; the order of the remaining
    segments is preserved.

    Args:
        value: Raw ``;``-delimited value.
        segment: Segment to remove.

    Returns:
        Rewritten value.
    """
    target = normalize_identifier(segment, CandidateKind.ENV_VAR)
    kept = [
        s
        for s in split_path_value(value)
        if normalize_identifier(s, CandidateKind.ENV_VAR) != target
    ]
    return PATH_DELIMITER.join(kept)


def broadcast_environment_change() -> bool:
    """Notify running applications that the environment changed.

    Sends ``WM_SETTINGCHANGE`` with ``"Environment"`` to all top-level
    windows so new processes started from Explorer see the change.

    Returns:
        True if the broadcast was sent, False otherwise.
    """
    if os.name != "nt":
        return False

    try:
        result = ctypes.c_ulong()
        sent = ctypes.windll.user32.SendMessageTimeoutW(  # type: ignore[attr-defined]
            _HWND_BROADCAST,
            _WM_SETTINGCHANGE,
            0,
            "Environment",
            _SMTO_ABORTIFHUNG,
            5000,
            ctypes.byref(result),
        )
    except (AttributeError, OSError) as e:
        logger.debug("Environment change broadcast unavailable: %s", e)
        return False
    return bool(sent)


class EnvironmentBackend(ABC):
    """Capability interface for persistent environment variables."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short backend name for logging."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this backend can be used on the current system."""

    @abstractmethod
    def read_scope(self, scope: EnvScope) -> dict[str, str]:
        """Read all variables of ``scope`` as raw ``name -> value`` pairs.

        Raises:
            CollectorSkip: If the scope cannot be read.
        """

    @abstractmethod
    def set_value(self, scope: EnvScope, name: str, value: str) -> None:
        """Overwrite variable ``name`` in ``scope``."""

    @abstractmethod
    def delete_value(self, scope: EnvScope, name: str) -> None:
        """Delete variable ``name`` from ``scope``."""


class WinregEnvironmentBackend(EnvironmentBackend):
    """Environment backend using the ``winreg`` module."""

    @property
    def name(self) -> str:
        return "winreg"

    def is_available(self) -> bool:
        return winreg is not None

    def _open(self, scope: EnvScope, *, write: bool = False) -> Any:
        if winreg is None:
            raise OSError("Windows registry APIs are unavailable on this platform")
        access = winreg.KEY_READ | (winreg.KEY_SET_VALUE if write else 0)
        hive, subkey = split_key_path(SCOPE_KEYS[scope])
        root = winreg.HKEY_LOCAL_MACHINE if hive == "HKLM" else winreg.HKEY_CURRENT_USER
        return winreg.OpenKey(root, subkey, 0, access | winreg.KEY_WOW64_64KEY)

    def read_scope(self, scope: EnvScope) -> dict[str, str]:
        values: dict[str, str] = {}
        try:
            with self._open(scope) as handle:
                _, count, _ = winreg.QueryInfoKey(handle)
                for index in range(count):
                    name, data, _ = winreg.EnumValue(handle, index)
                    if isinstance(data, str):
                        values[name] = data
        except OSError as e:
            raise CollectorSkip(f"Cannot read {scope.value} environment: {e}") from e
        return values

    def set_value(self, scope: EnvScope, name: str, value: str) -> None:
        with self._open(scope, write=True) as handle:
            try:
                _, value_type = winreg.QueryValueEx(handle, name)
            except FileNotFoundError:
                value_type = winreg.REG_EXPAND_SZ
            winreg.SetValueEx(handle, name, 0, value_type, value)

    def delete_value(self, scope: EnvScope, name: str) -> None:
        with self._open(scope, write=True) as handle:
            winreg.DeleteValue(handle, name)


class RegExeEnvironmentBackend(EnvironmentBackend):
    """Environment backend driving ``reg.exe``."""

    @property
    def name(self) -> str:
        return "reg.exe"

    def is_available(self) -> bool:
        return command_exists("reg")

    def read_scope(self, scope: EnvScope) -> dict[str, str]:
        key = SCOPE_KEYS[scope]
        try:
            result = run_command(["reg", "query", key, "/reg:64"])
        except OSError as e:
            raise CollectorSkip(f"reg.exe unavailable: {e}") from e
        if not result.success:
            raise CollectorSkip(f"Cannot read {scope.value} environment: {result.message}")

        return {
            item.name: item.data
            for item in parse_reg_query(result.stdout)
            if isinstance(item, RegValue) and item.value_type in ("REG_SZ", "REG_EXPAND_SZ")
        }

    def set_value(self, scope: EnvScope, name: str, value: str) -> None:
        args = ["reg", "add", SCOPE_KEYS[scope], "/v", name, "/t", "REG_EXPAND_SZ"]
        result = run_command([*args, "/d", value, "/f", "/reg:64"])
        if not result.success:
            raise RemovalError(result.message)

    def delete_value(self, scope: EnvScope, name: str) -> None:
        result = run_command(["reg", "delete", SCOPE_KEYS[scope], "/v", name, "/f", "/reg:64"])
        if not result.success:
            raise RemovalError(result.message)
