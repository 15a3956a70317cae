"""Integration tests for the cgm-days CLI tool.

Tests the CLI by actually invoking it via subprocess, simulating real usage.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import List


def run_cli_command(args: List[str], extra_env: dict = None) -> subprocess.CompletedProcess:
    """Run CLI command via subprocess.

    Args:
        args: Command arguments (without 'cgm-days')
        extra_env: Environment variables to add for this run

    Returns:
        CompletedProcess with stdout/stderr/returncode
    """
    env = dict(os.environ, PYTHONIOENCODING="utf-8", COLUMNS="120")
    env.pop("CGM_DAYS_WAKE_UP", None)
    if extra_env:
        env.update(extra_env)
    # Run as module to avoid installation requirement
    cmd = [sys.executable, "-m", "cgm_days.cgm_cli"] + args
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        cwd=Path(__file__).parent.parent,
        env=env,
    )


class TestCLIDetect:
    """Test CLI detect command."""

    def test_detect_format(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["detect", str(clarity_csv_file)])
        assert result.returncode == 0
        assert "Detected format:" in result.stdout
        assert "dexcom" in result.stdout

    def test_detect_verbose(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["detect", str(clarity_csv_file), "--verbose"])
        assert result.returncode == 0
        assert "DEXCOM" in result.stdout
        assert "bytes" in result.stdout

    def test_detect_unknown_format(self, tmp_path: Path) -> None:
        other = tmp_path / "other.csv"
        other.write_text("a,b,c\n1,2,3\n")
        result = run_cli_command(["detect", str(other)])
        assert result.returncode == 1
        assert "Unknown format" in result.stdout

    def test_detect_missing_file(self, tmp_path: Path) -> None:
        result = run_cli_command(["detect", str(tmp_path / "missing.csv")])
        assert result.returncode == 1
        assert "File not found" in result.stdout

    def test_detect_directory_path(self, tmp_path: Path) -> None:
        export_dir = tmp_path / "export.csv"
        export_dir.mkdir()
        result = run_cli_command(["detect", str(export_dir)])
        assert result.returncode == 1
        assert "✗" in result.stdout
        assert "Traceback" not in result.stderr


class TestCLIParse:
    """Test CLI parse command."""

    def test_parse_counts(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["parse", str(clarity_csv_file)])
        assert result.returncode == 0
        assert "Classified 12 rows" in result.stdout
        for event_type in ["FirstName", "EGV", "Insulin", "Carbs", "Calibration", "Unknown"]:
            assert event_type in result.stdout

    def test_parse_preview(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["parse", str(clarity_csv_file), "--preview"])
        assert result.returncode == 0
        assert "GlucoseReading" in result.stdout

    def test_parse_malformed(self, malformed_csv_file: Path) -> None:
        result = run_cli_command(["parse", str(malformed_csv_file)])
        assert result.returncode == 1
        assert "Classification error" in result.stdout

    def test_parse_directory_path(self, tmp_path: Path) -> None:
        export_dir = tmp_path / "export.csv"
        export_dir.mkdir()
        result = run_cli_command(["parse", str(export_dir)])
        assert result.returncode == 1
        assert "✗" in result.stdout
        assert "Traceback" not in result.stderr


class TestCLIDays:
    """Test CLI days command."""

    def test_days_default_wake_up(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["days", str(clarity_csv_file)])
        assert result.returncode == 0
        assert "2 clinical day(s)" in result.stdout
        assert "2024-02-29" in result.stdout
        assert "2024-03-01" in result.stdout

    def test_days_midnight_wake_up(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["days", str(clarity_csv_file), "--wake-up", "00:00"])
        assert result.returncode == 0
        assert "1 clinical day(s)" in result.stdout
        assert "2024-02-29" not in result.stdout

    def test_days_wake_up_from_environment(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["days", str(clarity_csv_file)], {"CGM_DAYS_WAKE_UP": "00:00:00"})
        assert result.returncode == 0
        assert "1 clinical day(s)" in result.stdout

    def test_days_all_events(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["days", str(clarity_csv_file), "--all-events"])
        assert result.returncode == 0
        assert "2 clinical day(s)" in result.stdout

    def test_days_invalid_wake_up(self, clarity_csv_file: Path) -> None:
        result = run_cli_command(["days", str(clarity_csv_file), "--wake-up", "late"])
        assert result.returncode == 1
        assert "Invalid wake-up time" in result.stdout

    def test_days_malformed(self, malformed_csv_file: Path) -> None:
        result = run_cli_command(["days", str(malformed_csv_file)])
        assert result.returncode == 1
        assert "Classification error" in result.stdout

    def test_days_directory_path(self, tmp_path: Path) -> None:
        export_dir = tmp_path / "export.csv"
        export_dir.mkdir()
        result = run_cli_command(["days", str(export_dir)])
        assert result.returncode == 1
        assert "✗" in result.stdout
        assert "Traceback" not in result.stderr


class TestCLIInfo:

    def test_info(self) -> None:
        result = run_cli_command(["info"])
        assert result.returncode == 0
        assert "Transmitter ID" in result.stdout
        assert "04:00:00" in result.stdout

    def test_info_lists_record_per_event_type(self) -> None:
        result = run_cli_command(["info"])
        assert result.returncode == 0
        for record_name in ["GlucoseReading", "InsulinRecord", "CalibrationRecord", "UnknownRecord"]:
            assert record_name in result.stdout


class TestGlucoseBand:

    def test_band_edges(self) -> None:
        from cgm_days.cgm_cli import glucose_band

        assert glucose_band(69) == "Low"
        assert glucose_band(70) == "In Range"
        assert glucose_band(180) == "In Range"
        assert glucose_band(181) == "High"
        assert glucose_band(250) == "High"
        assert glucose_band(251) == "Very High"
