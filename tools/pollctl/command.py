from __future__ import annotations

import subprocess
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .poll import CheckFn


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    def __init__(self, command: Sequence[str], result: CommandResult) -> None:
        self.command = list(command)
        self.result = result
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        cmd = " ".join(self.command)
        details = self.result.stderr.strip() or self.result.stdout.strip() or "no output"
        return f"Command exited {self.result.returncode}: {cmd}\n{details}"


class UnexpectedStatus(RuntimeError):
    def __init__(self, url: str, status: int, expected: int) -> None:
        self.url = url
        self.status = status
        self.expected = expected
        super().__init__(f"{url} responded with HTTP {status}, want {expected}")


def run_command(command: Sequence[str], timeout: float | None = None) -> CommandResult:
    proc = subprocess.run(
        list(command),
        check=False,
        text=True,
        capture_output=True,
        timeout=timeout,
    )
    return CommandResult(
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def run_or_raise(command: Sequence[str], timeout: float | None = None) -> CommandResult:
    result = run_command(command, timeout=timeout)
    if result.returncode != 0:
        raise CommandError(command, result)
    return result


# ------------------------------------------------------------
# Check builders
# ------------------------------------------------------------


def command_succeeds(command: Sequence[str], timeout: float | None = None) -> CheckFn:
    """Done once the command exits 0; non-zero exits surface as CommandError."""
    argv = list(command)

    def check() -> bool:
        run_or_raise(argv, timeout=timeout)
        return True

    return check


def path_exists(path: Path) -> CheckFn:
    def check() -> bool:
        return path.exists()

    return check


def url_responds(url: str, status: int = 200, timeout: float = 2.0) -> CheckFn:
    """Done once a GET on url answers with the expected status.

    Connection failures and other statuses raise, so they are reported as
    failed checks rather than silently retried.
    """

    def check() -> bool:
        req = urllib.request.Request(url, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                got = resp.status
        except urllib.error.HTTPError as e:
            got = e.code
        if got != status:
            raise UnexpectedStatus(url, got, status)
        return True

    return check
