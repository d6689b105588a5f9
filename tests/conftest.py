"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: the shared
matcher, a small catalog and in-memory registry/environment backends.
"""

import logging
from pathlib import Path

import pytest
from fakes import FakeEnvironmentBackend, FakeRegistryBackend
from tcsweep.backends.environment import EnvScope
from tcsweep.cli import types as cli_types
from tcsweep.core.catalog import Catalog, EntryType, ScanTarget
from tcsweep.core.matcher import PatternMatcher

PATTERNS = ("Beckhoff", "TwinCAT", "TcXae")


@pytest.fixture(autouse=True)
def _detach_cli_log_handler():
    """Remove the handler installed by CLI runs once the test ends."""
    yield
    if cli_types._handler is not None:
        logging.getLogger().removeHandler(cli_types._handler)
        cli_types._handler = None


@pytest.fixture
def matcher() -> PatternMatcher:
    """Matcher with a representative subset of the vendor tokens."""
    return PatternMatcher(PATTERNS)


@pytest.fixture
def make_catalog():
    """Factory for small catalogs with test overrides."""

    def _make(**overrides: object) -> Catalog:
        data: dict[str, object] = {
            "patterns": PATTERNS,
            "known_paths": (),
            "scan_targets": (),
            "sweep_excludes": ("\\Windows\\WinSxS",),
            "registry_roots": ("HKLM\\SOFTWARE",),
            "uninstall_roots": ("HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall",),
        }
        data.update(overrides)
        return Catalog.model_validate(data)

    return _make


@pytest.fixture
def scan_target():
    """Factory for scan targets."""

    def _make(parent: Path, depth: int = 1, entry_type: str = "directories") -> ScanTarget:
        return ScanTarget(parent=str(parent), depth=depth, entry_type=EntryType(entry_type))

    return _make


@pytest.fixture
def fake_registry() -> FakeRegistryBackend:
    """Registry holding a typical TwinCAT installation."""
    return FakeRegistryBackend(
        keys=[
            "HKLM\\SOFTWARE",
            "HKLM\\SOFTWARE\\Beckhoff",
            "HKLM\\SOFTWARE\\Beckhoff\\TwinCAT3",
            "HKLM\\SOFTWARE\\Microsoft",
            "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall",
        ],
        values={
            "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\{1234-ABCD}": {
                "DisplayName": "Beckhoff TwinCAT 3.1 XAE",
            },
            "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\{9999-0000}": {
                "DisplayName": "Other Vendor Runtime",
            },
        },
    )


@pytest.fixture
def fake_environment() -> FakeEnvironmentBackend:
    """Environment with TwinCAT PATH segments and variables."""
    return FakeEnvironmentBackend(
        {
            EnvScope.MACHINE: {
                "Path": "C:\\Windows\\system32;C:\\TwinCAT\\Common64;C:\\Windows",
                "TWINCAT3DIR": "C:\\TwinCAT\\3.1\\",
                "ComSpec": "C:\\Windows\\system32\\cmd.exe",
            },
            EnvScope.USER: {
                "Path": "%USERPROFILE%\\bin;C:\\TwinCAT\\3.1\\Bin\\",
                "TEMP": "%USERPROFILE%\\AppData\\Local\\Temp",
            },
        }
    )
