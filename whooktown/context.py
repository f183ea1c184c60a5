from __future__ import annotations
import threading
import time
from typing import Callable, List, Optional


class CallContext:
    """Cancellation flag plus optional deadline shared between a caller and a call.

    Any thread may call ``cancel``; the transport checks ``done`` before each
    attempt, bounds each request with ``remaining()``, stops waiting on an
    in-flight request through ``on_cancel`` and waits out backoff delays with
    ``wait`` so a cancellation interrupts them immediately.
    """

    def __init__(self, deadline: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = deadline  # time.monotonic() based
        self._reason: Optional[BaseException] = None
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @classmethod
    def background(cls) -> 'CallContext':
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> 'CallContext':
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._reason is None:
                self._reason = reason or CancelledError('context cancelled')
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            fn()

    def on_cancel(self, fn: Callable[[], None]) -> Callable[[], None]:
        """Run ``fn`` once when the context is cancelled (right away if it already is).

        Returns a function that unregisters ``fn``. Deadline expiry does not
        trigger callbacks.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)
                return lambda: self._unregister(fn)
        fn()
        return lambda: None

    def _unregister(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if fn in self._callbacks:
                self._callbacks.remove(fn)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    @property
    def reason(self) -> Optional[BaseException]:
        """Why the context is done, or None while it is live."""
        if self.cancelled:
            return self._reason
        if self.expired:
            return DeadlineExceeded('context deadline exceeded')
        return None

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if the context finished first."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            # Event.wait can return a hair before the deadline
            while not self.done:
                self._event.wait(self.remaining())
            return True
        return self._event.wait(seconds)


class CancelledError(Exception):
    pass


class DeadlineExceeded(Exception):
    pass
