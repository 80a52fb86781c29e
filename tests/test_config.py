from __future__ import annotations

from pathlib import Path

import pytest

from tools.pollctl.config import ConfigError, PollConfig, load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "poll.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_match_cli_defaults() -> None:
    cfg = PollConfig()

    assert cfg.interval_seconds == 1.0
    assert cfg.request_timeout_seconds == 120.0
    assert cfg.log_level == "INFO"


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "interval_seconds: 0.5\nrequest_timeout_seconds: 30\nlog_level: debug\n",
    )

    cfg = load_config(path)

    assert cfg == PollConfig(interval_seconds=0.5, request_timeout_seconds=30.0, log_level="DEBUG")


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(_write(tmp_path, "")) == PollConfig()


@pytest.mark.parametrize(
    "text",
    [
        "interval_seconds: 0\n",
        "request_timeout_seconds: -5\n",
        "interval_seconds: soon\n",
        "interval_seconds: true\n",
        "log_level: LOUD\n",
        "retries: 3\n",
        "- interval_seconds\n",
        "interval_seconds: [1\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))


def test_missing_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path / "nope.yaml")


def test_validated_normalizes_level() -> None:
    assert PollConfig(log_level="warning").validated().log_level == "WARNING"
