import json
from typing import Any, Dict, List

import pytest

from whooktown.transport import Transport


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = b'', read_error: BaseException = None):
        self.status_code = status_code
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            body = body.encode('utf-8')
        self._body = body
        self.read_error = read_error
        self.closed = False

    @property
    def content(self):
        if self.read_error is not None:
            raise self.read_error
        return self._body

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: replays queued responses or raises queued exceptions."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, *replies):
        self.replies.extend(replies)

    def request(self, method, url, data=None, headers=None, timeout=None, stream=False):
        self.calls.append({
            'method': method,
            'url': url,
            'data': data,
            'headers': dict(headers or {}),
            'timeout': timeout,
        })
        reply = self.replies.pop(0) if len(self.replies) > 1 else (self.replies[0] if self.replies else FakeResponse())
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self):
        self.closed = True

    def body(self, index: int = -1):
        data = self.calls[index]['data']
        return None if data is None else json.loads(data)


class RecordingWait:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, ctx, seconds):
        self.delays.append(seconds)
        return ctx.done


@pytest.fixture
def waits():
    return RecordingWait()


@pytest.fixture
def make_transport(waits):
    def _make(session, **kwargs):
        kwargs.setdefault('wait_fn', waits)
        return Transport('https://api.example.test/', session=session, **kwargs)
    return _make
