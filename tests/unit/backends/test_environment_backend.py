"""Unit tests for the persistent environment backends."""

from unittest.mock import patch

import pytest
from tcsweep.backends.environment import (
    SCOPE_KEYS,
    EnvScope,
    RegExeEnvironmentBackend,
    WinregEnvironmentBackend,
    broadcast_environment_change,
    remove_segment,
    split_path_value,
    winreg,
)
from tcsweep.core.errors import CollectorSkip, RemovalError
from tcsweep.utils.shell import CommandResult

USER_ENV_OUTPUT = """
HKEY_CURRENT_USER\\Environment
    Path    REG_EXPAND_SZ    %USERPROFILE%\\bin;C:\\TwinCAT\\3.1\\Bin
    TEMP    REG_EXPAND_SZ    %USERPROFILE%\\AppData\\Local\\Temp
    TcCount    REG_DWORD    0x1
"""


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


class TestPathValueHelpers:
    """Tests for split_path_value and remove_segment."""

    def test_split_drops_empty_segments(self) -> None:
        """Empty and blank segments are dropped."""
        assert split_path_value("C:\\A;;C:\\B; ;") == ["C:\\A", "C:\\B"]

    def test_remove_segment_case_insensitive(self) -> None:
        """Segments compare ignoring case and trailing separators."""
        value = "C:\\Windows;C:\\TwinCAT\\3.1\\Bin\\;C:\\Tools"
        assert remove_segment(value, "c:\\twincat\\3.1\\bin") == "C:\\Windows;C:\\Tools"

    def test_remove_segment_all_occurrences(self) -> None:
        """Duplicate occurrences are all removed."""
        assert remove_segment("C:\\TwinCAT;C:\\A;C:\\TwinCAT", "C:\\TwinCAT") == "C:\\A"

    def test_remove_only_segment(self) -> None:
        """Removing the only segment leaves an empty value."""
        assert remove_segment("C:\\TwinCAT", "C:\\TwinCAT") == ""

    def test_remove_keeps_unexpanded_references(self) -> None:
        """Other segments are written back verbatim."""
        result = remove_segment("%SystemRoot%\\system32;C:\\TwinCAT", "C:\\TwinCAT")
        assert result == "%SystemRoot%\\system32"


class TestRegExeEnvironmentBackend:
    """Tests for the reg.exe environment backend."""

    def test_read_scope_keeps_strings(self) -> None:
        """Only string values are returned."""
        with patch(
            "tcsweep.backends.environment.run_command", return_value=_ok(USER_ENV_OUTPUT)
        ) as mock_run:
            values = RegExeEnvironmentBackend().read_scope(EnvScope.USER)

        assert values == {
            "Path": "%USERPROFILE%\\bin;C:\\TwinCAT\\3.1\\Bin",
            "TEMP": "%USERPROFILE%\\AppData\\Local\\Temp",
        }
        assert mock_run.call_args.args[0][2] == SCOPE_KEYS[EnvScope.USER]

    def test_read_scope_failure(self) -> None:
        """A failing query skips the scope."""
        failed = CommandResult(stdout="", stderr="ERROR: Access is denied.", returncode=1)
        with patch("tcsweep.backends.environment.run_command", return_value=failed):
            with pytest.raises(CollectorSkip, match="Machine"):
                RegExeEnvironmentBackend().read_scope(EnvScope.MACHINE)

    def test_set_value(self) -> None:
        """Values are written as REG_EXPAND_SZ."""
        with patch("tcsweep.backends.environment.run_command", return_value=_ok()) as mock_run:
            RegExeEnvironmentBackend().set_value(EnvScope.USER, "Path", "C:\\A")

        args = mock_run.call_args.args[0]
        assert args[:3] == ["reg", "add", "HKCU\\Environment"]
        assert args[args.index("/v") + 1] == "Path"
        assert args[args.index("/t") + 1] == "REG_EXPAND_SZ"
        assert args[args.index("/d") + 1] == "C:\\A"

    def test_delete_value_failure(self) -> None:
        """A failing reg delete raises RemovalError."""
        failed = CommandResult(stdout="", stderr="ERROR: not found", returncode=1)
        with patch("tcsweep.backends.environment.run_command", return_value=failed):
            with pytest.raises(RemovalError, match="not found"):
                RegExeEnvironmentBackend().delete_value(EnvScope.USER, "TWINCAT3DIR")


class TestWinregEnvironmentBackend:
    """Tests for the winreg environment backend."""

    @pytest.mark.skipif(winreg is not None, reason="winreg present")
    def test_without_winreg(self) -> None:
        """Without winreg reads skip and writes fail."""
        backend = WinregEnvironmentBackend()
        assert not backend.is_available()
        with pytest.raises(CollectorSkip):
            backend.read_scope(EnvScope.USER)
        with pytest.raises(OSError):
            backend.delete_value(EnvScope.USER, "X")


class TestBroadcast:
    """Tests for broadcast_environment_change."""

    @pytest.mark.skipif(winreg is not None, reason="non-Windows behavior")
    def test_noop_outside_windows(self) -> None:
        """Nothing is broadcast outside Windows."""
        assert broadcast_environment_change() is False
