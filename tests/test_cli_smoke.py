from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from typer.testing import CliRunner

from tools.pollctl.cli import EXIT_BAD_CONFIG, EXIT_NOT_READY, app

runner = CliRunner()


def test_pollctl_help_runs() -> None:
    result = subprocess.run(
        [sys.executable, "-m", "tools.pollctl.cli", "--help"],
        check=False,
        text=True,
        capture_output=True,
    )
    assert result.returncode == 0, result.stderr
    assert "wait-file" in result.stdout


def test_wait_file_ready(tmp_path: Path) -> None:
    target = tmp_path / "ready"
    target.touch()

    result = runner.invoke(app, ["--poll-interval", "0.01", "wait-file", str(target)])

    assert result.exit_code == 0, result.stdout
    assert "(OK after" in result.stdout


def test_wait_file_times_out(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["--poll-interval", "0.02", "--request-timeout", "0.1", "wait-file", str(tmp_path / "never")],
    )

    assert result.exit_code == EXIT_NOT_READY
    assert "deadline exceeded" in result.stdout


def test_wait_cmd_reports_last_check_error() -> None:
    result = runner.invoke(
        app,
        [
            "--poll-interval",
            "0.02",
            "--request-timeout",
            "0.3",
            "wait-cmd",
            "--",
            sys.executable,
            "-c",
            "raise SystemExit(4)",
        ],
    )

    assert result.exit_code == EXIT_NOT_READY
    assert "last check error" in result.stdout


def test_wait_cmd_success() -> None:
    result = runner.invoke(app, ["wait-cmd", "--", sys.executable, "-c", "pass"])

    assert result.exit_code == 0, result.stdout


def test_config_file_and_bad_values(tmp_path: Path) -> None:
    config = tmp_path / "poll.yaml"
    config.write_text("interval_seconds: 0.01\nlog_level: warning\n", encoding="utf-8")
    target = tmp_path / "ready"
    target.touch()

    ok = runner.invoke(app, ["--config", str(config), "wait-file", str(target)])
    bad = runner.invoke(app, ["--poll-interval", "0", "wait-file", str(target)])

    assert ok.exit_code == 0, ok.stdout
    assert bad.exit_code == EXIT_BAD_CONFIG
    assert "interval_seconds must be positive" in bad.stdout
