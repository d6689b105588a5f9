"""Unit tests for core/executor.py.

Tests the per-item state machine: existence check, primary removal,
single fallback attempt and the post-fallback existence check.
"""

import subprocess
from unittest.mock import MagicMock

from tcsweep.core.errors import RemovalError
from tcsweep.core.executor import Executor
from tcsweep.core.removers import Remover
from tcsweep.models.candidate import Candidate, CandidateKind
from tcsweep.models.outcome import ItemResult, ItemState

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_remover(
    kind: CandidateKind = CandidateKind.FILESYSTEM_PATH,
    exists: bool | list[bool] = True,
) -> MagicMock:
    """Create a mock remover; ``exists`` may list successive answers."""
    remover = MagicMock(spec=Remover)
    remover.kind = kind
    if isinstance(exists, list):
        remover.exists.side_effect = exists
    else:
        remover.exists.return_value = exists
    return remover


def _path(identifier: str = "C:\\TwinCAT") -> Candidate:
    return Candidate(CandidateKind.FILESYSTEM_PATH, identifier)


# ---------------------------------------------------------------------------
# Item state machine
# ---------------------------------------------------------------------------


class TestExecutorStates:
    """Tests for the terminal state of single items."""

    def test_missing_item_is_gone(self) -> None:
        """Items that vanished are GONE and never removed."""
        remover = _make_remover(exists=False)
        outcome = Executor([remover]).execute([_path()])

        assert outcome.results[0].state == ItemState.GONE
        remover.remove.assert_not_called()
        remover.fallback_remove.assert_not_called()
        assert outcome.gone == 1
        assert outcome.failed == 0

    def test_primary_success(self) -> None:
        """Primary success skips the fallback."""
        remover = _make_remover()
        outcome = Executor([remover]).execute([_path()])

        assert outcome.results[0].state == ItemState.DELETED_PRIMARY
        remover.fallback_remove.assert_not_called()
        assert outcome.deleted == 1

    def test_fallback_success_counts_as_deleted(self) -> None:
        """An item removed by the fallback is deleted, not failed."""
        remover = _make_remover(exists=[True, False])
        remover.remove.side_effect = PermissionError("access denied")

        outcome = Executor([remover]).execute([_path()])

        assert outcome.results[0].state == ItemState.DELETED_FALLBACK
        remover.fallback_remove.assert_called_once()
        assert outcome.deleted == 1
        assert outcome.failed == 0

    def test_fallback_attempted_exactly_once(self) -> None:
        """A failing fallback is not retried."""
        remover = _make_remover()
        remover.remove.side_effect = OSError("in use")
        remover.fallback_remove.side_effect = RemovalError("Access is denied.")

        outcome = Executor([remover]).execute([_path()])

        remover.remove.assert_called_once()
        remover.fallback_remove.assert_called_once()
        result = outcome.results[0]
        assert result.state == ItemState.FAILED
        assert result.error == "Access is denied."

    def test_fallback_timeout_is_failure(self) -> None:
        """A fallback utility timing out fails the item."""
        remover = _make_remover()
        remover.remove.side_effect = OSError("in use")
        remover.fallback_remove.side_effect = subprocess.TimeoutExpired(["rmdir"], 600)

        outcome = Executor([remover]).execute([_path()])

        assert outcome.results[0].state == ItemState.FAILED
        assert outcome.results[0].error

    def test_still_present_after_fallback(self) -> None:
        """A silent fallback that leaves the item behind is a failure."""
        remover = _make_remover(exists=[True, True])
        remover.remove.side_effect = OSError("in use")

        outcome = Executor([remover]).execute([_path()])

        result = outcome.results[0]
        assert result.state == ItemState.FAILED
        assert result.error == "still present after fallback removal"

    def test_existence_check_error_assumes_present(self) -> None:
        """An unreadable item is treated as present and removal is attempted."""
        remover = _make_remover()
        remover.exists.side_effect = PermissionError("denied")

        outcome = Executor([remover]).execute([_path()])

        remover.remove.assert_called_once()
        assert outcome.results[0].state == ItemState.DELETED_PRIMARY

    def test_empty_error_message_uses_type_name(self) -> None:
        """Failures without a message are labelled with the exception type."""
        remover = _make_remover()
        remover.remove.side_effect = OSError()
        remover.fallback_remove.side_effect = RemovalError()

        outcome = Executor([remover]).execute([_path()])

        assert outcome.results[0].error == "RemovalError"


# ---------------------------------------------------------------------------
# Batch behavior
# ---------------------------------------------------------------------------


class TestExecutorBatch:
    """Tests for execute() over whole deletion sets."""

    def test_failure_does_not_abort_batch(self) -> None:
        """Items after a failure are still processed, in order."""
        remover = _make_remover()
        remover.remove.side_effect = [OSError("locked"), None, None]
        remover.fallback_remove.side_effect = RemovalError("denied")
        items = [_path("C:\\A"), _path("C:\\B"), _path("C:\\C")]

        outcome = Executor([remover]).execute(items)

        assert [r.candidate for r in outcome.results] == items
        assert [r.state for r in outcome.results] == [
            ItemState.FAILED,
            ItemState.DELETED_PRIMARY,
            ItemState.DELETED_PRIMARY,
        ]
        assert outcome.deleted == 2
        assert outcome.failed == 1
        assert len(outcome.failures) == 1

    def test_dry_run_removes_nothing(self) -> None:
        """Dry run reports existing items and leaves them alone."""
        remover = _make_remover(exists=[True, False])
        executor = Executor([remover], dry_run=True)

        outcome = executor.execute([_path("C:\\A"), _path("C:\\B")])

        assert executor.dry_run
        assert [r.state for r in outcome.results] == [ItemState.DRY_RUN, ItemState.GONE]
        remover.remove.assert_not_called()
        remover.fallback_remove.assert_not_called()

    def test_kind_without_remover_becomes_warning(self) -> None:
        """Services are left untouched and reported as warnings."""
        service = Candidate(CandidateKind.SERVICE, "TcSysSrv")
        outcome = Executor([_make_remover()]).execute([service])

        assert outcome.results == ()
        assert outcome.warnings == (service,)

    def test_dispatches_by_kind(self) -> None:
        """Each candidate goes to the remover of its kind."""
        fs_remover = _make_remover(CandidateKind.FILESYSTEM_PATH)
        reg_remover = _make_remover(CandidateKind.REGISTRY_KEY)
        key = Candidate(CandidateKind.REGISTRY_KEY, "HKLM\\SOFTWARE\\Beckhoff")

        Executor([fs_remover, reg_remover]).execute([_path(), key])

        fs_remover.remove.assert_called_once_with(_path())
        reg_remover.remove.assert_called_once_with(key)

    def test_on_result_callback(self) -> None:
        """The callback sees every result as it is produced."""
        seen: list[ItemResult] = []
        outcome = Executor([_make_remover()], on_result=seen.append).execute(
            [_path("C:\\A"), _path("C:\\B")]
        )

        assert seen == list(outcome.results)
