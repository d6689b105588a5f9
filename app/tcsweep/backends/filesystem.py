"""Filesystem backends.

The native backend uses ``os``/``shutil``; the shell backend reuses the
native reads and removes stubborn entries with the platform's command
line utilities (``rmdir``/``del`` on Windows, ``rm`` elsewhere). The
executor uses the shell backend only as the fallback mechanism.
"""

import ctypes
import logging
import os
import shutil
import stat
import string
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from tcsweep.core.catalog import EntryType
from tcsweep.core.errors import CollectorSkip, RemovalError
from tcsweep.utils.shell import run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FsEntry:
    """A listed filesystem entry.

    Attributes:
        path: Absolute path of the entry.
        is_dir: True for real directories (not links or junctions).
    """

    path: str
    is_dir: bool

    @property
    def name(self) -> str:
        """Return the leaf name of the entry."""
        return os.path.basename(self.path.rstrip("\\/")) or self.path


class FilesystemBackend(ABC):
    """Capability interface for filesystem access."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short backend name for logging."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if ``path`` exists (links count even when dangling).

        Raises:
            OSError: If existence cannot be determined (e.g. access denied).
        """

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Check if ``path`` is a real directory."""

    @abstractmethod
    def list_entries(
        self,
        parent: str,
        depth: int = 1,
        *,
        entry_type: EntryType | None = None,
        prune: Callable[[FsEntry], bool] | None = None,
    ) -> Iterator[FsEntry]:
        """List entries below ``parent`` down to ``depth`` levels.

        Args:
            parent: Directory to list.
            depth: Levels to list (1 = immediate children).
            entry_type: Yield only files or only directories; None for both.
            prune: Directories for which this returns True are not descended.

        Yields:
            FsEntry for each listed entry.

        Raises:
            CollectorSkip: If ``parent`` is missing or unreadable.
        """

    @abstractmethod
    def iter_directories(
        self,
        root: str,
        exclude: Callable[[str], bool],
        prune: Callable[[str], bool] | None = None,
    ) -> Iterator[str]:
        """Recursively yield every directory below ``root``.

        Directories for which ``exclude`` returns True are neither yielded
        nor descended into. Directories for which ``prune`` returns True
        are yielded but not descended into.

        Raises:
            CollectorSkip: If ``root`` is missing or unreadable.
        """

    @abstractmethod
    def size(self, path: str) -> int | None:
        """Return the aggregate size in bytes, or None if unavailable."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove ``path`` (recursively for directories).

        Raises:
            OSError: If the native removal fails.
            RemovalError: If a removal utility reports failure.
        """


def _is_real_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False) and not entry.is_junction()
    except OSError:
        return False


def _clear_readonly(func: Callable[..., object], path: str, exc: BaseException) -> None:
    """rmtree error handler that clears the read-only bit and retries once."""
    if not isinstance(exc, PermissionError):
        raise exc
    os.chmod(path, stat.S_IWRITE)
    func(path)


class NativeFilesystemBackend(FilesystemBackend):
    """Filesystem backend built on ``os``, ``shutil`` and ``pathlib``."""

    @property
    def name(self) -> str:
        return "native"

    def exists(self, path: str) -> bool:
        try:
            os.lstat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        return True

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path) and not os.path.islink(path) and not Path(path).is_junction()

    def list_entries(
        self,
        parent: str,
        depth: int = 1,
        *,
        entry_type: EntryType | None = None,
        prune: Callable[[FsEntry], bool] | None = None,
    ) -> Iterator[FsEntry]:
        if not os.path.isdir(parent):
            raise CollectorSkip(f"Directory not found: {parent}")

        stack: list[tuple[str, int]] = [(parent, 1)]
        while stack:
            current, level = stack.pop()
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name.casefold())
            except OSError as e:
                if current == parent:
                    raise CollectorSkip(f"Cannot list {parent}: {e}") from e
                logger.debug("Cannot list %s: %s", current, e)
                continue

            subdirs: list[str] = []
            for entry in entries:
                item = FsEntry(path=entry.path, is_dir=_is_real_dir(entry))
                if entry_type is None or (entry_type == EntryType.DIRECTORIES) == item.is_dir:
                    yield item
                if item.is_dir and level < depth and not (prune and prune(item)):
                    subdirs.append(item.path)

            stack.extend((p, level + 1) for p in reversed(subdirs))

    def iter_directories(
        self,
        root: str,
        exclude: Callable[[str], bool],
        prune: Callable[[str], bool] | None = None,
    ) -> Iterator[str]:
        if not os.path.isdir(root):
            raise CollectorSkip(f"Volume not found: {root}")

        stack = [root]
        while stack:
            current = stack.pop()
            if current != root:
                yield current
                if prune is not None and prune(current):
                    continue

            try:
                with os.scandir(current) as it:
                    children = [e.path for e in it if _is_real_dir(e)]
            except OSError as e:
                if current == root:
                    raise CollectorSkip(f"Cannot list {root}: {e}") from e
                logger.debug("Cannot list %s: %s", current, e)
                continue

            for child in sorted(children, key=str.casefold, reverse=True):
                if exclude(child):
                    logger.debug("Excluded from sweep: %s", child)
                    continue
                stack.append(child)

    def size(self, path: str) -> int | None:
        try:
            if not self.is_dir(path):
                return os.lstat(path).st_size

            total = 0
            for dirpath, _dirnames, filenames in os.walk(path):
                for filename in filenames:
                    try:
                        total += os.lstat(os.path.join(dirpath, filename)).st_size
                    except OSError:
                        continue
            return total
        except OSError:
            return None

    def remove(self, path: str) -> None:
        if os.path.islink(path) or Path(path).is_junction():
            try:
                os.unlink(path)
            except (IsADirectoryError, PermissionError):
                os.rmdir(path)
            return

        if os.path.isdir(path):
            shutil.rmtree(path, onexc=_clear_readonly)
            return

        try:
            os.unlink(path)
        except PermissionError:
            os.chmod(path, stat.S_IWRITE)
            os.unlink(path)


class ShellFilesystemBackend(NativeFilesystemBackend):
    """Filesystem backend that removes entries via command-line utilities.

    Reads are inherited from the native backend. Removal shells out to
    ``cmd /c rmdir /s /q`` or ``cmd /c del /f /q /a`` on Windows and to
    ``rm -rf`` / ``rm -f`` elsewhere.
    """

    # Large install trees can take a while to delete
    _REMOVE_TIMEOUT: float = 600.0

    @property
    def name(self) -> str:
        return "shell"

    def remove(self, path: str) -> None:
        result = run_command(self._remove_command(path), timeout=self._REMOVE_TIMEOUT)
        if not result.success:
            raise RemovalError(result.message)

    def _remove_command(self, path: str) -> list[str]:
        is_dir = self.is_dir(path)
        if os.name == "nt":
            if is_dir:
                return ["cmd", "/c", "rmdir", "/s", "/q", path]
            return ["cmd", "/c", "del", "/f", "/q", "/a", path]
        if is_dir:
            return ["rm", "-rf", "--", path]
        return ["rm", "-f", "--", path]


def list_volumes() -> list[str]:
    """List the roots of all mounted volumes.

    On Windows this uses the ``GetLogicalDrives`` bitmask; elsewhere the
    filesystem root is the only volume.

    Returns:
        Volume root paths such as ``C:\\``.
    """
    if os.name != "nt":
        return [os.path.abspath(os.sep)]

    try:
        bitmask = ctypes.windll.kernel32.GetLogicalDrives()  # type: ignore[attr-defined]
    except (AttributeError, OSError) as e:
        logger.debug("GetLogicalDrives unavailable, probing letters: %s", e)
        bitmask = (1 << 26) - 1

    volumes: list[str] = []
    for index, letter in enumerate(string.ascii_uppercase):
        root = f"{letter}:\\"
        if bitmask & (1 << index) and os.path.exists(root):
            volumes.append(root)
    return volumes
