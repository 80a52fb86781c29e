from __future__ import annotations

import signal as os_signal
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

Callback = Callable[[], None]


class SignalError(Exception):
    pass


class Cancelled(SignalError):
    def __init__(self, message: str = "cancelled") -> None:
        super().__init__(message)


class DeadlineExceeded(SignalError, TimeoutError):
    def __init__(self, message: str = "deadline exceeded") -> None:
        super().__init__(message)


class Signal:
    """Cancellation source that fires at most once.

    A signal fires when it is cancelled, when its parent fires, or when its
    deadline passes. Once fired, error() returns the reason and every
    subscribed callback has been called exactly once.
    """

    def __init__(
        self,
        parent: Signal | None = None,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._parent = parent
        self._deadline = deadline
        self._clock = clock
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self._callbacks: list[Callback] = []
        self._timer: threading.Timer | None = None

        if parent is not None:
            parent.subscribe(self._inherit)

        if deadline is not None:
            remaining = deadline - clock()
            if remaining <= 0:
                self._fire(DeadlineExceeded())
            else:
                self._start_timer(remaining)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def fired(self) -> bool:
        return self.error() is not None

    def error(self) -> BaseException | None:
        with self._lock:
            err = self._error
        if err is not None:
            return err

        # Parent first, so an expired ancestor wins without its timer having run.
        parent_error = self._parent.error() if self._parent is not None else None
        if parent_error is not None:
            self._fire(parent_error)
        elif self._past_deadline():
            self._fire(DeadlineExceeded())

        with self._lock:
            return self._error

    def cancel(self, error: BaseException | None = None) -> None:
        self._fire(error if error is not None else Cancelled())

    def subscribe(self, callback: Callback) -> None:
        with self._lock:
            if self._error is None:
                self._callbacks.append(callback)
                return
        callback()

    def unsubscribe(self, callback: Callback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the signal fires or timeout elapses. Returns fired()."""
        with Waker(self) as waker:
            waker.sleep(timeout)
        return self.fired()

    def close(self) -> None:
        """Release the deadline timer and detach from the parent."""
        self.cancel()

    def __enter__(self) -> Signal:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _past_deadline(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def _start_timer(self, seconds: float) -> None:
        timer = threading.Timer(seconds, self._expire)
        timer.daemon = True
        with self._lock:
            if self._error is not None:
                return
            self._timer = timer
            timer.start()

    def _expire(self) -> None:
        self._fire(DeadlineExceeded())

    def _inherit(self) -> None:
        parent_error = self._parent.error() if self._parent is not None else None
        self._fire(parent_error or Cancelled())

    def _fire(self, error: BaseException) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            callbacks, self._callbacks = self._callbacks, []
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.cancel()
        if self._parent is not None:
            self._parent.unsubscribe(self._inherit)
        for callback in callbacks:
            callback()


class Waker:
    """Event set as soon as any of the given signals fires.

    Subscribes on enter and unsubscribes on exit, so each waiter owns its
    registration only for the duration of the block.
    """

    def __init__(self, *signals: Signal) -> None:
        self._signals = signals
        self._event = threading.Event()

    def __enter__(self) -> Waker:
        for s in self._signals:
            s.subscribe(self._event.set)
        return self

    def __exit__(self, *exc_info: object) -> None:
        for s in self._signals:
            s.unsubscribe(self._event.set)

    def sleep(self, seconds: float | None) -> bool:
        return self._event.wait(seconds)


def background() -> Signal:
    return Signal()


def with_cancel(parent: Signal) -> Signal:
    return Signal(parent=parent)


def with_deadline(parent: Signal, deadline: float, clock: Callable[[], float] = time.monotonic) -> Signal:
    # A parent deadline that comes first still wins through inheritance.
    return Signal(parent=parent, deadline=deadline, clock=clock)


def with_timeout(parent: Signal, seconds: float, clock: Callable[[], float] = time.monotonic) -> Signal:
    return with_deadline(parent, clock() + seconds, clock=clock)


@contextmanager
def handle_signals(root: Signal) -> Iterator[Signal]:
    """Cancel root on SIGINT or SIGTERM while the block runs.

    Previous handlers are restored on exit. Must be entered from the main thread.
    """

    def _handler(signum: int, _frame: object) -> None:
        # Runs on the main thread, which may already hold root's lock.
        err = Cancelled(f"received {os_signal.Signals(signum).name}")
        threading.Thread(target=root.cancel, args=(err,), daemon=True).start()

    previous = {
        sig: os_signal.signal(sig, _handler) for sig in (os_signal.SIGINT, os_signal.SIGTERM)
    }
    try:
        yield root
    finally:
        for sig, handler in previous.items():
            os_signal.signal(sig, handler)
