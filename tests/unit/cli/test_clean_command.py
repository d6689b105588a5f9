"""Unit tests for the clean command.

Collectors and removers are replaced so the interactive flow can be
driven without touching the machine.
"""

from unittest.mock import MagicMock, patch

import pytest
from fakes import FakeEnvironmentBackend
from tcsweep.backends.environment import EnvScope
from tcsweep.cli.main import app
from tcsweep.collectors.base import Collector
from tcsweep.core.errors import SetupError
from tcsweep.core.removers import EnvironmentRemover, Remover
from tcsweep.models.candidate import Candidate, CandidateKind, CandidateSet
from typer.testing import CliRunner

runner = CliRunner()

CLEAN = "tcsweep.cli.commands.clean"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _path(identifier: str, source: str = "known-paths") -> Candidate:
    return Candidate(CandidateKind.FILESYSTEM_PATH, identifier, source=source)


def _fs_remover(exists: bool = True) -> MagicMock:
    remover = MagicMock(spec=Remover)
    remover.kind = CandidateKind.FILESYSTEM_PATH
    remover.exists.return_value = exists
    return remover


def _run(
    found: list[Candidate],
    answers: list[bool],
    removers: list[Remover] | None = None,
    args: tuple[str, ...] = ("clean",),
    sweep_found: list[Candidate] | None = None,
):
    """Invoke the CLI with the given findings and yes/no answers."""
    sweep = MagicMock(spec=Collector)
    sweep.collect.return_value = CandidateSet(sweep_found or [])
    with (
        patch(f"{CLEAN}.require_admin") as mock_admin,
        patch(f"{CLEAN}.get_available_collectors", return_value=[]),
        patch(f"{CLEAN}.run_collectors", return_value=[CandidateSet(found)]),
        patch(f"{CLEAN}.get_sweep_collector", return_value=sweep),
        patch(f"{CLEAN}.get_removers", return_value=removers or []),
        patch(f"{CLEAN}.ask_yes_no", side_effect=answers) as mock_ask,
        patch(f"{CLEAN}.broadcast_environment_change", return_value=True) as mock_broadcast,
    ):
        result = runner.invoke(app, list(args))
    return result, mock_admin, mock_ask, mock_broadcast


# ---------------------------------------------------------------------------
# Flow
# ---------------------------------------------------------------------------


class TestCleanFlow:
    """Tests for the confirmation flow of tcsweep clean."""

    def test_nothing_found(self) -> None:
        """An empty plan exits 0 with a clean message."""
        result, _, mock_ask, _ = _run([], answers=[False])

        assert result.exit_code == 0
        assert "No TwinCAT residue found." in result.output
        assert mock_ask.call_count == 1

    def test_decline_deletion_exits_1(self) -> None:
        """Declining the deletion prompt removes nothing and exits 1."""
        remover = _fs_remover()
        result, _, _, _ = _run([_path("C:\\TwinCAT")], answers=[False, False], removers=[remover])

        assert result.exit_code == 1
        assert "Aborted." in result.output
        remover.remove.assert_not_called()

    def test_accept_deletion(self) -> None:
        """Accepted items are removed and summarized."""
        remover = _fs_remover()
        result, mock_admin, _, _ = _run(
            [_path("C:\\TwinCAT"), _path("C:\\TwinCAT\\3.1", source="pattern-scan")],
            answers=[False, True],
            removers=[remover],
        )

        assert result.exit_code == 0
        mock_admin.assert_called_once()
        # The child is pruned by reconciliation
        remover.remove.assert_called_once_with(_path("C:\\TwinCAT"))
        assert "Deleted 1 item(s), 0 already gone." in result.output

    def test_failure_exits_3(self) -> None:
        """Any failed item makes the run exit 3."""
        remover = _fs_remover()
        remover.remove.side_effect = PermissionError("in use")
        remover.fallback_remove.side_effect = OSError("still in use")

        result, _, _, _ = _run([_path("C:\\TwinCAT")], answers=[False, True], removers=[remover])

        assert result.exit_code == 3
        assert "1 failed" in result.output

    def test_sweep_results_join_plan(self) -> None:
        """Sweep findings are reconciled together with the standard findings."""
        remover = _fs_remover()
        result, _, _, _ = _run(
            [_path("C:\\TwinCAT")],
            answers=[True, True],
            removers=[remover],
            sweep_found=[_path("D:\\Backup\\TwinCAT", source="volume-sweep")],
        )

        assert result.exit_code == 0
        assert remover.remove.call_count == 2
        assert "Deleted 2 item(s)" in result.output

    def test_dry_run(self) -> None:
        """Dry run skips elevation and the deletion prompt."""
        remover = _fs_remover()
        result, mock_admin, mock_ask, _ = _run(
            [_path("C:\\TwinCAT")],
            answers=[False],
            removers=[remover],
            args=("clean", "--dry-run"),
        )

        assert result.exit_code == 0
        mock_admin.assert_not_called()
        assert mock_ask.call_count == 1
        remover.remove.assert_not_called()
        assert "1 item(s) would be removed" in result.output

    def test_bare_invocation_runs_clean(self) -> None:
        """Running tcsweep without a command starts the clean flow."""
        result, mock_admin, _, _ = _run([], answers=[False], args=())

        assert result.exit_code == 0
        mock_admin.assert_called_once()
        assert "No TwinCAT residue found." in result.output

    def test_missing_elevation_exits_2(self) -> None:
        """Setup failures exit 2 before anything is scanned."""
        with (
            patch(f"{CLEAN}.require_admin", side_effect=SetupError("Administrator privileges")),
            patch(f"{CLEAN}.run_collectors") as mock_run,
        ):
            result = runner.invoke(app, ["clean"])

        assert result.exit_code == 2
        assert "Administrator privileges" in result.output
        mock_run.assert_not_called()


# ---------------------------------------------------------------------------
# Environment and manual-action items
# ---------------------------------------------------------------------------


class TestCleanEnvironment:
    """Tests for the separate environment confirmation."""

    @pytest.fixture
    def env_remover(self, fake_environment: FakeEnvironmentBackend) -> EnvironmentRemover:
        """Environment remover over the in-memory environment."""
        return EnvironmentRemover(fake_environment, fake_environment)

    def test_environment_accepted(
        self, env_remover: EnvironmentRemover, fake_environment: FakeEnvironmentBackend
    ) -> None:
        """Accepted environment entries are removed and broadcast."""
        entry = Candidate(CandidateKind.ENV_VAR, "TWINCAT3DIR", scope="Machine")

        result, _, _, mock_broadcast = _run([entry], answers=[False, True], removers=[env_remover])

        assert result.exit_code == 0
        assert "TWINCAT3DIR" not in fake_environment.scopes[EnvScope.MACHINE]
        mock_broadcast.assert_called_once()

    def test_environment_declined(
        self, env_remover: EnvironmentRemover, fake_environment: FakeEnvironmentBackend
    ) -> None:
        """Declining the environment prompt leaves it alone without failing."""
        entry = Candidate(CandidateKind.ENV_VAR, "TWINCAT3DIR", scope="Machine")

        result, _, _, mock_broadcast = _run([entry], answers=[False, False], removers=[env_remover])

        assert result.exit_code == 0
        assert "Environment left unchanged." in result.output
        assert "TWINCAT3DIR" in fake_environment.scopes[EnvScope.MACHINE]
        mock_broadcast.assert_not_called()

    def test_services_reported_not_removed(self) -> None:
        """Services and tasks are printed with manual commands."""
        service = Candidate(CandidateKind.SERVICE, "TcSysSrv", detail="TwinCAT System")
        task = Candidate(CandidateKind.SCHEDULED_TASK, "\\Beckhoff\\Update")
        remover = _fs_remover()

        result, _, mock_ask, _ = _run([service, task], answers=[False], removers=[remover])

        assert result.exit_code == 0
        assert "2 item(s) need manual action" in result.output
        assert 'sc delete "TcSysSrv"' in result.output
        assert mock_ask.call_count == 1
        remover.remove.assert_not_called()


# ---------------------------------------------------------------------------
# Real prompt
# ---------------------------------------------------------------------------


class TestCleanPrompt:
    """Tests driving the actual terminal prompt."""

    def test_empty_answer_declines(self) -> None:
        """Pressing Enter declines both prompts."""
        remover = _fs_remover()
        with (
            patch(f"{CLEAN}.require_admin"),
            patch(f"{CLEAN}.get_available_collectors", return_value=[]),
            patch(f"{CLEAN}.run_collectors", return_value=[CandidateSet([_path("C:\\TwinCAT")])]),
            patch(f"{CLEAN}.get_removers", return_value=[remover]),
        ):
            result = runner.invoke(app, ["clean"], input="\n\n")

        assert result.exit_code == 1
        remover.remove.assert_not_called()

    def test_yes_answer(self) -> None:
        """'yes' in any case confirms."""
        remover = _fs_remover()
        with (
            patch(f"{CLEAN}.require_admin"),
            patch(f"{CLEAN}.get_available_collectors", return_value=[]),
            patch(f"{CLEAN}.run_collectors", return_value=[CandidateSet([_path("C:\\TwinCAT")])]),
            patch(f"{CLEAN}.get_removers", return_value=[remover]),
        ):
            result = runner.invoke(app, ["clean"], input="n\nYES\n")

        assert result.exit_code == 0
        remover.remove.assert_called_once()
