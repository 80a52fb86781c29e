from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class PollConfig:
    interval_seconds: float = 1.0
    request_timeout_seconds: float = 120.0
    log_level: str = "INFO"

    def validated(self) -> PollConfig:
        if self.interval_seconds <= 0:
            raise ConfigError(f"interval_seconds must be positive, got {self.interval_seconds}")
        if self.request_timeout_seconds <= 0:
            raise ConfigError(
                f"request_timeout_seconds must be positive, got {self.request_timeout_seconds}"
            )
        level = self.log_level.upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"unknown log level: {self.log_level}")
        return replace(self, log_level=level)


def _as_float(key: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    return float(value)


def load_config(path: Path) -> PollConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    known = {f.name for f in fields(PollConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(map(str, unknown))}")

    values: dict[str, object] = {}
    for key in ("interval_seconds", "request_timeout_seconds"):
        if key in data:
            values[key] = _as_float(key, data[key])
    if "log_level" in data:
        values["log_level"] = str(data["log_level"])

    return PollConfig(**values).validated()  # type: ignore[arg-type]
