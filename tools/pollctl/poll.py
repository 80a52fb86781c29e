from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from .cancel import Signal, Waker

CheckFn = Callable[[], bool]


class Aborted(Exception):
    def __init__(self, message: str = "aborted") -> None:
        super().__init__(message)


class LogSink(Protocol):
    def info(self, message: str, **fields: Any) -> None: ...

    def warning(self, message: str, **fields: Any) -> None: ...


@dataclass(frozen=True)
class PollOutcome:
    elapsed: float
    error: Optional[BaseException] = None
    checks: int = 0
    last_check_error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Poller:
    """Polls a check until it reports done, the root signal fires or the
    per-call signal fires.

    Check exceptions are logged and polling continues; only the signals end
    an unsuccessful poll. The root signal always takes precedence: if it has
    fired by the time the loop ends, the outcome is Aborted regardless of the
    per-call signal.
    """

    def __init__(
        self,
        root: Signal,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        log: LogSink | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"poll interval must be positive, got {interval}")
        self.root = root
        self.interval = interval
        self._clock = clock
        self._log: LogSink = log if log is not None else logger

    def poll(self, signal: Signal, check: CheckFn) -> PollOutcome:
        start = self._clock()
        self._log.info("start polling (interval={interval}s)", interval=self.interval)

        checks = 0
        last_error: Exception | None = None

        with Waker(self.root, signal) as waker:
            first = True
            while not self.root.fired() and not signal.fired():
                if not first:
                    waker.sleep(self.interval)
                    if self.root.fired() or signal.fired():
                        break
                first = False

                checks += 1
                try:
                    done = check()
                except Exception as e:
                    last_error = e
                    self._log.warning("poll check failed: {error}", error=e)
                    continue

                if not done:
                    continue

                took = self._clock() - start
                self._log.info("poll confirmed (took={took:.3f}s)", took=took)
                return PollOutcome(elapsed=took, checks=checks, last_check_error=last_error)

        error: BaseException | None = signal.error()
        if self.root.fired():
            error = Aborted()
        return PollOutcome(
            elapsed=self._clock() - start,
            error=error,
            checks=checks,
            last_check_error=last_error,
        )

    def poll_or_raise(self, signal: Signal, check: CheckFn) -> float:
        outcome = self.poll(signal, check)
        if outcome.error is not None:
            raise outcome.error
        return outcome.elapsed
