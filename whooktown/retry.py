"""Retry policy for transport calls, expressed as a small state machine.

IDLE -> ATTEMPTING on start. From ATTEMPTING, a success or a fatal failure
ends the call (DONE); a retryable failure moves to BACKOFF while attempts
remain, DONE otherwise. BACKOFF -> ATTEMPTING when the delay elapses, or DONE
when the call context is cancelled first.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional

from .exceptions import (
    InternalServerError,
    NetworkError,
    WhooktownError,
)


class RetryState(str, Enum):
    IDLE = 'idle'
    ATTEMPTING = 'attempting'
    BACKOFF = 'backoff'
    DONE = 'done'


class RetryEvent(str, Enum):
    SUCCESS = 'success'
    RETRYABLE_FAILURE = 'retryable_failure'
    FATAL_FAILURE = 'fatal_failure'
    CANCELLED = 'cancelled'


def classify_failure(error: WhooktownError) -> RetryEvent:
    """Client errors (4xx) and local failures are final; 5xx and network errors are transient."""
    status = error.status_code
    if status is not None:
        if 400 <= status < 500:
            return RetryEvent.FATAL_FAILURE
        return RetryEvent.RETRYABLE_FAILURE
    if isinstance(error, (NetworkError, InternalServerError)):
        return RetryEvent.RETRYABLE_FAILURE
    return RetryEvent.FATAL_FAILURE


class RetryMachine:
    def __init__(self, max_retries: int = 3, retry_wait: float = 1.0):
        self.max_retries = max(0, int(max_retries))
        self.retry_wait = float(retry_wait)
        self.state = RetryState.IDLE
        self.attempt = -1
        self.error: Optional[WhooktownError] = None
        self.succeeded = False

    def start(self) -> None:
        if self.state is not RetryState.IDLE:
            raise RuntimeError(f"cannot start from {self.state.value}")
        self.state = RetryState.ATTEMPTING
        self.attempt = 0

    @property
    def next_delay(self) -> float:
        """Linear backoff: the wait before attempt ``a`` is ``retry_wait * a``."""
        return self.retry_wait * (self.attempt + 1)

    def record_success(self) -> RetryState:
        self._expect(RetryState.ATTEMPTING)
        self.succeeded = True
        self.error = None
        self.state = RetryState.DONE
        return self.state

    def record_failure(self, error: WhooktownError) -> RetryState:
        self._expect(RetryState.ATTEMPTING)
        self.error = error
        event = classify_failure(error)
        if event is RetryEvent.RETRYABLE_FAILURE and self.attempt < self.max_retries:
            self.state = RetryState.BACKOFF
        else:
            self.state = RetryState.DONE
        return self.state

    def resume(self) -> RetryState:
        self._expect(RetryState.BACKOFF)
        self.attempt += 1
        self.state = RetryState.ATTEMPTING
        return self.state

    def cancel(self, error: WhooktownError) -> RetryState:
        self.error = error
        self.state = RetryState.DONE
        return self.state

    def _expect(self, state: RetryState) -> None:
        if self.state is not state:
            raise RuntimeError(f"invalid transition from {self.state.value} (expected {state.value})")
