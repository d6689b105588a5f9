"""Registry backends.

Key paths use short hive prefixes (``HKLM\\SOFTWARE\\Beckhoff``). The
winreg backend walks the 64-bit registry view through the native API;
the reg.exe backend drives ``reg query`` / ``reg delete`` and serves as
the fallback when the API rejects a deletion.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from tcsweep.core.errors import CollectorSkip, RemovalError
from tcsweep.utils.shell import command_exists, run_command

try:
    import winreg
except ImportError:  # pragma: no cover - non-Windows platforms
    winreg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# Long hive names as printed by reg.exe, mapped to short prefixes.
HIVE_ALIASES: dict[str, str] = {
    "HKEY_LOCAL_MACHINE": "HKLM",
    "HKEY_CURRENT_USER": "HKCU",
    "HKEY_CLASSES_ROOT": "HKCR",
    "HKEY_USERS": "HKU",
    "HKEY_CURRENT_CONFIG": "HKCC",
}

_VALUE_LINE = re.compile(r"^\s+(?P<name>.*?)\s+(?P<type>REG_[A-Z_]+)(?:\s+(?P<data>.*))?$")

# reg.exe wording for a missing key or value
_NOT_FOUND = "unable to find the specified registry key"

# Decides whether a key name or display name belongs to the vendor
NameMatch = Callable[[str], bool]


def normalize_key_path(path: str) -> str:
    """Normalize a key path to its short-hive form without trailing separators.

    Args:
        path: Key path using a long or short hive prefix.

    Returns:
        Key path such as ``HKLM\\SOFTWARE\\Beckhoff``.
    """
    text = path.strip().rstrip("\\")
    hive, sep, rest = text.partition("\\")
    short = HIVE_ALIASES.get(hive.upper(), hive.upper())
    return f"{short}{sep}{rest}"


def split_key_path(path: str) -> tuple[str, str]:
    """Split a key path into ``(short hive, subkey)``."""
    hive, _, subkey = normalize_key_path(path).partition("\\")
    return hive, subkey


def leaf_name(path: str) -> str:
    """Return the last component of a key path."""
    return path.rstrip("\\").rpartition("\\")[2]


@dataclass(frozen=True, slots=True)
class RegValue:
    """A value line parsed from ``reg query`` output.

    Attributes:
        key: Key the value belongs to (short-hive form).
        name: Value name (``(Default)`` for the unnamed value).
        value_type: Registry type such as ``REG_SZ``.
        data: Value data as printed by reg.exe.
    """

    key: str
    name: str
    value_type: str
    data: str


def parse_reg_query(output: str) -> Iterator[str | RegValue]:
    """Parse ``reg query`` output into key paths and values.

    Key header lines are yielded as strings; value lines as RegValue
    bound to the most recent key header.

    Args:
        output: Standard output of ``reg query``.

    Yields:
        Key path strings and RegValue instances in output order.
    """
    current: str | None = None
    for line in output.splitlines():
        if not line.strip():
            continue
        if line.startswith("HK"):
            current = normalize_key_path(line)
            yield current
            continue
        match = _VALUE_LINE.match(line)
        if match and current is not None:
            yield RegValue(
                key=current,
                name=match.group("name"),
                value_type=match.group("type"),
                data=match.group("data") or "",
            )


class RegistryBackend(ABC):
    """Capability interface for registry access."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short backend name for logging."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this backend can be used on the current system."""

    @abstractmethod
    def key_exists(self, key: str) -> bool:
        """Check if ``key`` exists.

        Only a definite "not found" reads as absent.

        Raises:
            OSError: If the key cannot be checked (e.g. access denied).
            RemovalError: If reg.exe fails for another reason.
        """

    @abstractmethod
    def search_keys(self, root: str, matches: NameMatch, terms: Sequence[str]) -> Iterator[str]:
        """Recursively yield keys below ``root`` whose own name satisfies ``matches``.

        Matching keys are not descended into. ``terms`` are the literal
        tokens behind ``matches``; a backend may use them to narrow its
        query but never to decide a match.

        Raises:
            CollectorSkip: If ``root`` is missing or unreadable.
        """

    @abstractmethod
    def search_uninstall(
        self, root: str, matches: NameMatch, terms: Sequence[str], value_name: str
    ) -> Iterator[tuple[str, str]]:
        """Yield ``(entry key, value)`` for matching uninstall entries.

        Entries are the direct children of ``root``; an entry matches when
        its ``value_name`` value satisfies ``matches``. ``terms`` may narrow
        the query as in :meth:`search_keys`.

        Raises:
            CollectorSkip: If ``root`` is missing or unreadable.
        """

    @abstractmethod
    def delete_key(self, key: str) -> None:
        """Delete ``key`` and all of its subkeys.

        Raises:
            OSError: If the native API rejects the deletion.
            RemovalError: If reg.exe reports failure.
        """


def _ensure_winreg() -> None:
    if winreg is None:
        raise OSError("Windows registry APIs are unavailable on this platform")


class WinregBackend(RegistryBackend):
    """Registry backend using the ``winreg`` module (64-bit view)."""

    @property
    def name(self) -> str:
        return "winreg"

    def is_available(self) -> bool:
        return winreg is not None

    def _hive(self, hive: str) -> Any:
        _ensure_winreg()
        mapping = {
            "HKLM": winreg.HKEY_LOCAL_MACHINE,
            "HKCU": winreg.HKEY_CURRENT_USER,
            "HKCR": winreg.HKEY_CLASSES_ROOT,
            "HKU": winreg.HKEY_USERS,
            "HKCC": winreg.HKEY_CURRENT_CONFIG,
        }
        try:
            return mapping[hive]
        except KeyError:
            raise OSError(f"Unknown registry hive: {hive}") from None

    def _open(self, key: str, access: int | None = None) -> Any:
        _ensure_winreg()
        hive, subkey = split_key_path(key)
        mask = (access if access is not None else winreg.KEY_READ) | winreg.KEY_WOW64_64KEY
        return winreg.OpenKey(self._hive(hive), subkey, 0, mask)

    def _subkeys(self, key: str) -> list[str]:
        with self._open(key) as handle:
            count, _, _ = winreg.QueryInfoKey(handle)
            return [winreg.EnumKey(handle, i) for i in range(count)]

    def key_exists(self, key: str) -> bool:
        try:
            with self._open(key):
                return True
        except FileNotFoundError:
            return False

    def search_keys(self, root: str, matches: NameMatch, terms: Sequence[str]) -> Iterator[str]:
        root = normalize_key_path(root)
        try:
            children = self._subkeys(root)
        except OSError as e:
            raise CollectorSkip(f"Cannot open {root}: {e}") from e

        stack = [(root, children)]
        while stack:
            parent, names = stack.pop()
            for child in names:
                path = f"{parent}\\{child}"
                if matches(child):
                    yield path
                    continue
                try:
                    grandchildren = self._subkeys(path)
                except OSError as e:
                    logger.debug("Cannot open %s: %s", path, e)
                    continue
                if grandchildren:
                    stack.append((path, grandchildren))

    def search_uninstall(
        self, root: str, matches: NameMatch, terms: Sequence[str], value_name: str
    ) -> Iterator[tuple[str, str]]:
        root = normalize_key_path(root)
        try:
            entries = self._subkeys(root)
        except OSError as e:
            raise CollectorSkip(f"Cannot open {root}: {e}") from e

        for entry in entries:
            path = f"{root}\\{entry}"
            try:
                with self._open(path) as handle:
                    value, _ = winreg.QueryValueEx(handle, value_name)
            except OSError:
                continue
            text = str(value)
            if matches(text):
                yield path, text

    def delete_key(self, key: str) -> None:
        key = normalize_key_path(key)
        for child in self._subkeys(key):
            self.delete_key(f"{key}\\{child}")
        hive, subkey = split_key_path(key)
        winreg.DeleteKeyEx(self._hive(hive), subkey, winreg.KEY_WOW64_64KEY, 0)


class RegExeBackend(RegistryBackend):
    """Registry backend driving ``reg.exe`` (64-bit view)."""

    # Recursive searches below HKLM\SOFTWARE can take minutes
    _SEARCH_TIMEOUT: float = 900.0

    @property
    def name(self) -> str:
        return "reg.exe"

    def is_available(self) -> bool:
        return command_exists("reg")

    def key_exists(self, key: str) -> bool:
        result = run_command(["reg", "query", normalize_key_path(key), "/reg:64"])
        if result.success:
            return True
        if _NOT_FOUND in result.message.casefold():
            return False
        raise RemovalError(f"reg query {key} failed: {result.message}")

    def _query(self, args: list[str], root: str) -> str:
        try:
            result = run_command(["reg", "query", *args, "/reg:64"], timeout=self._SEARCH_TIMEOUT)
        except OSError as e:
            raise CollectorSkip(f"reg.exe unavailable: {e}") from e
        if not result.success:
            raise CollectorSkip(f"reg query {root} failed: {result.message}")
        return result.stdout

    def search_keys(self, root: str, matches: NameMatch, terms: Sequence[str]) -> Iterator[str]:
        root = normalize_key_path(root)
        seen: set[str] = set()
        # reg.exe takes a single /f filter, so each term is its own query
        for term in terms:
            output = self._query([root, "/f", term, "/k", "/s"], root)
            for item in parse_reg_query(output):
                if not isinstance(item, str) or item == root or item.casefold() in seen:
                    continue
                if matches(leaf_name(item)):
                    seen.add(item.casefold())
                    yield item

    def search_uninstall(
        self, root: str, matches: NameMatch, terms: Sequence[str], value_name: str
    ) -> Iterator[tuple[str, str]]:
        root = normalize_key_path(root)
        wanted = value_name.casefold()
        prefix = root + "\\"
        seen: set[str] = set()
        for term in terms:
            output = self._query([root, "/f", term, "/d", "/s"], root)
            for item in parse_reg_query(output):
                if not isinstance(item, RegValue):
                    continue
                if item.name.casefold() != wanted or not matches(item.data):
                    continue
                if not item.key.upper().startswith(prefix.upper()):
                    continue
                entry = prefix + item.key[len(prefix) :].split("\\", 1)[0]
                if entry.casefold() not in seen:
                    seen.add(entry.casefold())
                    yield entry, item.data

    def delete_key(self, key: str) -> None:
        result = run_command(["reg", "delete", normalize_key_path(key), "/f", "/reg:64"])
        if not result.success:
            raise RemovalError(result.message)
