from __future__ import annotations

import sys
from typing import Iterator

import pytest
from loguru import logger

from tools.pollctl.config import ConfigError
from tools.pollctl.logs import configure_logging


@pytest.fixture(autouse=True)
def _restore_loguru() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_configure_logging_writes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("info")

    logger.debug("hidden")
    logger.warning("poll check failed: {error}", error="boom")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "WARNING" in err
    assert "poll check failed: boom" in err


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ConfigError):
        configure_logging("chatty")
