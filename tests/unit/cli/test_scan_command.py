"""Unit tests for scan command.

Tests for the CLI scan command implementation.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from tcsweep.cli.main import app
from tcsweep.collectors.base import Collector
from tcsweep.core.errors import CatalogError
from tcsweep.models.candidate import Candidate, CandidateKind, CandidateSet
from typer.testing import CliRunner

runner = CliRunner()

SCAN = "tcsweep.cli.commands.scan"


def _collector(name: str) -> MagicMock:
    collector = MagicMock(spec=Collector)
    collector.name = name
    return collector


@pytest.fixture
def findings() -> list[CandidateSet]:
    """Candidate sets as two collectors would return them."""
    return [
        CandidateSet(
            [
                Candidate(CandidateKind.FILESYSTEM_PATH, "C:\\TwinCAT", source="known-paths"),
                Candidate(CandidateKind.FILESYSTEM_PATH, "C:\\TwinCAT\\3.1", source="known-paths"),
            ]
        ),
        CandidateSet([Candidate(CandidateKind.SERVICE, "TcSysSrv", source="services")]),
    ]


class TestScanCommand:
    """Tests for tcsweep scan command."""

    def test_scan_help(self) -> None:
        """Scan command shows help."""
        result = runner.invoke(app, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--sweep" in result.stdout

    def test_scan_table(self, findings: list[CandidateSet]) -> None:
        """Findings are shown as tables without prompting."""
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[_collector("known-paths")]),
            patch(f"{SCAN}.run_collectors", return_value=findings),
        ):
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        assert "Deletion Set" in result.output
        assert "TcSysSrv" in result.output
        assert "3 candidate(s) found, 1 after reconciliation" in result.output

    def test_scan_nothing_found(self) -> None:
        """An empty scan reports a clean machine."""
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[]),
            patch(f"{SCAN}.run_collectors", return_value=[]),
        ):
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        assert "No TwinCAT residue found." in result.output

    def test_scan_json(self, findings: list[CandidateSet]) -> None:
        """JSON output carries candidates, plan and summary."""
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[_collector("known-paths")]),
            patch(f"{SCAN}.run_collectors", return_value=findings),
        ):
            result = runner.invoke(app, ["scan", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metadata"]["collectors"] == ["known-paths"]
        assert data["metadata"]["sweep"] is False
        assert data["plan"]["filesystem"] == ["C:\\TwinCAT"]
        assert data["plan"]["service"] == ["TcSysSrv"]
        assert data["summary"]["total"] == 3

    def test_scan_sweep_adds_collector(self, findings: list[CandidateSet]) -> None:
        """--sweep appends the full-volume sweep to the collectors."""
        sweep = _collector("volume-sweep")
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[_collector("known-paths")]),
            patch(f"{SCAN}.get_sweep_collector", return_value=sweep),
            patch(f"{SCAN}.run_collectors", return_value=findings) as mock_run,
        ):
            result = runner.invoke(app, ["scan", "--sweep", "--format", "json"])

        assert result.exit_code == 0
        assert mock_run.call_args.args[0][-1] is sweep
        data = json.loads(result.stdout)
        assert data["metadata"]["sweep"] is True

    def test_scan_export(self, findings: list[CandidateSet], tmp_path: Path) -> None:
        """--export writes the JSON report to a file."""
        export_file = tmp_path / "reports" / "scan.json"
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[]),
            patch(f"{SCAN}.run_collectors", return_value=findings),
        ):
            result = runner.invoke(app, ["scan", "--export", str(export_file)])

        assert result.exit_code == 0
        assert export_file.exists()
        data = json.loads(export_file.read_text(encoding="utf-8"))
        assert len(data["candidates"]) == 3

    def test_scan_export_to_directory_fails(self, tmp_path: Path) -> None:
        """Exporting onto a directory is a setup failure."""
        with (
            patch(f"{SCAN}.get_available_collectors", return_value=[]),
            patch(f"{SCAN}.run_collectors", return_value=[]),
        ):
            result = runner.invoke(app, ["scan", "--export", str(tmp_path)])

        assert result.exit_code == 2
        assert "directory" in result.output

    def test_scan_bad_catalog(self) -> None:
        """A broken catalog exits with the setup code."""
        with (
            patch(f"{SCAN}.load_catalog", side_effect=CatalogError("Invalid catalog")),
            patch(f"{SCAN}.run_collectors") as mock_run,
        ):
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 2
        assert "Invalid catalog" in result.output
        mock_run.assert_not_called()
