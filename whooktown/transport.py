from __future__ import annotations
import dataclasses
import json
import logging
import threading
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

import requests

from .classifier import classify_error
from .context import CallContext, DeadlineExceeded
from .exceptions import (
    InternalServerError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
    WhooktownError,
)
from .retry import RetryMachine, RetryState

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = 'application/json'

Decoder = Callable[[Any], Any]
Waiter = Callable[[CallContext, float], bool]

# Raised by requests while preparing the URL or headers, before anything is sent.
_MALFORMED_REQUEST = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


class Credentials:
    """Bearer token and admin secret, read together as one snapshot.

    Writes may race with in-flight calls: last write wins and a call sees
    whichever pair was current when its headers were built.
    """

    def __init__(self, token: str = '', admin_token: str = ''):
        self._lock = threading.Lock()
        self._token = token
        self._admin_token = admin_token

    def set_token(self, token: str) -> None:
        with self._lock:
            self._token = token or ''

    def set_admin_token(self, token: str) -> None:
        with self._lock:
            self._admin_token = token or ''

    def snapshot(self) -> Tuple[str, str]:
        with self._lock:
            return self._token, self._admin_token


def _encode_default(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(body: Any) -> bytes:
    """Serialize a request body to JSON bytes; raises ValidationError when it cannot be."""
    try:
        return json.dumps(body, default=_encode_default, allow_nan=False).encode('utf-8')
    except (TypeError, ValueError, RecursionError) as e:
        raise ValidationError('failed to marshal request body', cause=e) from e


def _wait_on_context(ctx: CallContext, seconds: float) -> bool:
    return ctx.wait(seconds)


class Transport:
    """JSON-over-HTTP transport for one service base URL.

    Retries 5xx and network failures with linear backoff, never retries client
    errors or local failures, injects bearer/admin credentials and turns every
    failure into a ``WhooktownError`` subclass.

    When the caller passes a ``ctx``, each attempt runs on a worker thread so
    that cancelling the context (or reaching its deadline) returns control
    right away, even while the engine is still waiting on the server.
    ``debug`` traces every response status at DEBUG on this module's logger.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        token: str = '',
        admin_token: str = '',
        max_retries: int = 3,
        retry_wait: float = 1.0,
        timeout: float = 30.0,
        debug: bool = False,
        wait_fn: Optional[Waiter] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.credentials = Credentials(token, admin_token)
        self.max_retries = max_retries
        self.retry_wait = retry_wait
        self.timeout = timeout
        self.debug = debug
        self._wait = wait_fn or _wait_on_context

    def set_token(self, token: str) -> None:
        self.credentials.set_token(token)

    def set_admin_token(self, token: str) -> None:
        self.credentials.set_admin_token(token)

    # Verbs

    def fetch(self, path: str, into: Optional[Decoder] = None, ctx: Optional[CallContext] = None) -> Any:
        return self.request('GET', path, into=into, ctx=ctx)

    def submit(self, path: str, body: Any = None, into: Optional[Decoder] = None,
               ctx: Optional[CallContext] = None) -> Any:
        return self.request('POST', path, body=body, into=into, ctx=ctx)

    def replace(self, path: str, body: Any = None, into: Optional[Decoder] = None,
                ctx: Optional[CallContext] = None) -> Any:
        return self.request('PUT', path, body=body, into=into, ctx=ctx)

    def amend(self, path: str, body: Any = None, into: Optional[Decoder] = None,
              ctx: Optional[CallContext] = None) -> Any:
        return self.request('PATCH', path, body=body, into=into, ctx=ctx)

    def remove(self, path: str, ctx: Optional[CallContext] = None) -> None:
        self.request('DELETE', path, ctx=ctx)

    # Retry loop

    def request(self, method: str, path: str, *, body: Any = None, into: Optional[Decoder] = None,
                ctx: Optional[CallContext] = None) -> Any:
        # only a caller supplied context can be cancelled from outside
        abortable = ctx is not None
        ctx = ctx or CallContext.background()
        machine = RetryMachine(self.max_retries, self.retry_wait)
        machine.start()
        result = None
        while machine.state is not RetryState.DONE:
            if machine.state is RetryState.BACKOFF:
                delay = machine.next_delay
                logger.debug("%s %s: attempt %d failed (%s), retrying in %.2fs",
                             method, path, machine.attempt + 1, machine.error, delay)
                if self._wait(ctx, delay) or ctx.done:
                    machine.cancel(RequestTimeoutError('request cancelled', cause=ctx.reason))
                    break
                machine.resume()
            try:
                result = self._execute(method, path, body, into, ctx, abortable)
            except WhooktownError as e:
                machine.record_failure(e)
            else:
                machine.record_success()

        if machine.succeeded:
            return result
        error = machine.error
        if machine.attempt > 0 and machine.attempt == machine.max_retries:
            logger.warning("%s %s failed after %d attempts: %s", method, path, machine.attempt + 1, error)
        raise error from error.cause

    # Single attempt

    def _url(self, path: str) -> str:
        if not isinstance(path, str):
            raise ValidationError(f"invalid path: {path!r}")
        if any(ch in path for ch in ('\r', '\n', '\t', '\x00')):
            raise ValidationError(f"invalid path: {path}")
        return self.base_url + '/' + path.lstrip('/')

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': JSON_MEDIA_TYPE,
            'Accept': JSON_MEDIA_TYPE,
        }
        token, admin_token = self.credentials.snapshot()
        if token:
            headers['Authorization'] = f"Bearer {token}"
        if admin_token:
            headers['X-Admin-Token'] = admin_token
        return headers

    def _attempt_timeout(self, ctx: CallContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def _execute(self, method: str, path: str, body: Any, into: Optional[Decoder], ctx: CallContext,
                 abortable: bool = False) -> Any:
        if ctx.done:
            raise RequestTimeoutError('request cancelled', cause=ctx.reason)
        url = self._url(path)
        payload = encode_body(body) if body is not None else None

        if abortable:
            status, content = self._exchange_abortable(method, url, path, payload, ctx)
        else:
            status, content = self._exchange(method, url, path, payload, ctx)
        if self.debug:
            logger.debug("%s %s -> %d (%d bytes)", method, path, status, len(content))

        if status >= 400:
            raise classify_error(status, content)

        if into is None or not content:
            return None
        try:
            document = json.loads(content)
        except ValueError as e:
            raise InternalServerError('failed to parse response', cause=e) from e
        # JSON null leaves the destination untouched, like an empty body
        if document is None:
            return None
        try:
            return into(document)
        except Exception as e:
            raise InternalServerError('failed to parse response', cause=e) from e

    def _exchange(self, method: str, url: str, path: str, payload: Optional[bytes],
                  ctx: CallContext) -> Tuple[int, bytes]:
        """Send one request and drain its body; the response is always closed."""
        try:
            resp = self.session.request(method, url, data=payload, headers=self._headers(),
                                        timeout=self._attempt_timeout(ctx), stream=True)
        except _MALFORMED_REQUEST as e:
            raise ValidationError(f"invalid path: {path}", cause=e) from e
        except requests.exceptions.Timeout as e:
            if ctx.done:
                raise RequestTimeoutError('request cancelled', cause=ctx.reason) from e
            raise NetworkError('request failed', cause=e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError('request failed', cause=e) from e

        try:
            content = resp.content
        except requests.exceptions.RequestException as e:
            raise NetworkError('failed to read response body', cause=e) from e
        finally:
            resp.close()
        return resp.status_code, content or b''

    def _exchange_abortable(self, method: str, url: str, path: str, payload: Optional[bytes],
                            ctx: CallContext) -> Tuple[int, bytes]:
        """Run ``_exchange`` on a worker thread and stop waiting as soon as ``ctx`` is done.

        An abandoned exchange keeps running until the engine gives up (bounded by
        the attempt timeout); it still drains and closes its response, so the
        connection goes back to the pool.
        """
        outcome: Dict[str, Any] = {}
        finished = threading.Event()

        def run() -> None:
            try:
                outcome['result'] = self._exchange(method, url, path, payload, ctx)
            except Exception as e:
                outcome['error'] = e
            finally:
                finished.set()

        worker = threading.Thread(target=run, name=f"whooktown-{method.lower()}", daemon=True)
        unregister = ctx.on_cancel(finished.set)
        try:
            worker.start()
            finished.wait(ctx.remaining())
        finally:
            unregister()

        if 'error' in outcome:
            raise outcome['error']
        if 'result' in outcome:
            return outcome['result']
        logger.debug("%s %s abandoned in flight: %s", method, path, ctx.reason)
        reason = ctx.reason or DeadlineExceeded('context deadline exceeded')
        raise RequestTimeoutError('request cancelled', cause=reason)
