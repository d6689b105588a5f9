"""OS access backends used by collectors and removers.

Each capability has a native-API implementation and a shell-utility
implementation; the executor uses the latter as its fallback mechanism.
"""

from tcsweep.backends.environment import (
    EnvironmentBackend,
    EnvScope,
    RegExeEnvironmentBackend,
    WinregEnvironmentBackend,
)
from tcsweep.backends.filesystem import (
    FilesystemBackend,
    FsEntry,
    NativeFilesystemBackend,
    ShellFilesystemBackend,
    list_volumes,
)
from tcsweep.backends.registry import RegExeBackend, RegistryBackend, WinregBackend

__all__ = [
    "EnvScope",
    "EnvironmentBackend",
    "FilesystemBackend",
    "FsEntry",
    "NativeFilesystemBackend",
    "RegExeBackend",
    "RegExeEnvironmentBackend",
    "RegistryBackend",
    "ShellFilesystemBackend",
    "WinregBackend",
    "WinregEnvironmentBackend",
    "list_volumes",
]
