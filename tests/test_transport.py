import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from conftest import FakeResponse, FakeSession
from whooktown.context import CallContext, CancelledError, DeadlineExceeded
from whooktown.exceptions import (
    BadRequestError,
    ErrorCode,
    InternalServerError,
    NetworkError,
    QuotaLimitError,
    RequestTimeoutError,
    ValidationError,
)
from whooktown.models import SensorData, Status
from whooktown.transport import Transport, encode_body


def test_server_errors_are_retried_with_linear_backoff(make_transport, waits):
    session = FakeSession(FakeResponse(500, {'error': 'db down'}))
    t = make_transport(session)
    with pytest.raises(InternalServerError) as exc:
        t.fetch('/ui/quota', into=dict)
    assert len(session.calls) == 4
    assert waits.delays == [1.0, 2.0, 3.0]
    assert exc.value.status_code == 500
    assert exc.value.message == 'db down'


def test_retry_wait_scales_delays(make_transport, waits):
    session = FakeSession(FakeResponse(503))
    t = make_transport(session, max_retries=2, retry_wait=0.25)
    with pytest.raises(InternalServerError):
        t.fetch('/workflow')
    assert waits.delays == [0.25, 0.5]
    assert len(session.calls) == 3


def test_recovers_after_transient_failure(make_transport, waits):
    session = FakeSession(FakeResponse(502), FakeResponse(200, {'ok': True}))
    t = make_transport(session)
    assert t.fetch('/workflow/health', into=dict) == {'ok': True}
    assert len(session.calls) == 2
    assert waits.delays == [1.0]


@pytest.mark.parametrize('status', [400, 401, 403, 404, 409, 422])
def test_client_errors_are_not_retried(make_transport, waits, status):
    session = FakeSession(FakeResponse(status, {'message': 'no'}))
    t = make_transport(session)
    with pytest.raises(Exception) as exc:
        t.submit('/sensors', {'id': 'x'})
    assert len(session.calls) == 1
    assert waits.delays == []
    assert exc.value.status_code == status


def test_quota_error_is_not_retried(make_transport):
    session = FakeSession(FakeResponse(402, {'code': 'QUOTA_EXCEEDED', 'details': {'plan': 'free', 'limit': 1}}))
    t = make_transport(session)
    with pytest.raises(QuotaLimitError) as exc:
        t.submit('/ui/layout', {'name': 'x'})
    assert len(session.calls) == 1
    assert exc.value.limit == 1


def test_network_errors_are_retried(make_transport, waits):
    session = FakeSession(requests.exceptions.ConnectionError('refused'), FakeResponse(200, b''))
    t = make_transport(session)
    assert t.fetch('/sensors/_health') is None
    assert len(session.calls) == 2


def test_network_error_exhaustion_keeps_cause(make_transport):
    boom = requests.exceptions.ConnectionError('refused')
    session = FakeSession(boom)
    t = make_transport(session, max_retries=1)
    with pytest.raises(NetworkError) as exc:
        t.fetch('/sensors/_health')
    assert exc.value.code is ErrorCode.NETWORK_ERROR
    assert exc.value.status_code is None
    assert exc.value.cause is boom
    assert exc.value.__cause__ is boom
    assert 'caused by' in str(exc.value)


def test_engine_timeout_on_live_context_is_a_network_error(make_transport):
    session = FakeSession(requests.exceptions.ReadTimeout('slow'), FakeResponse(200, b''))
    t = make_transport(session)
    assert t.fetch('/ui/scenes') is None
    assert len(session.calls) == 2


def test_exhaustion_logs_warning(make_transport, caplog):
    session = FakeSession(FakeResponse(500))
    t = make_transport(session, max_retries=2)
    with caplog.at_level(logging.WARNING, logger='whooktown'):
        with pytest.raises(InternalServerError):
            t.fetch('/ui/scenes')
    assert 'failed after 3 attempts' in caplog.text


def test_unserializable_body_is_never_sent(make_transport):
    session = FakeSession()
    t = make_transport(session)
    with pytest.raises(ValidationError) as exc:
        t.submit('/sensors', {'id': object()})
    assert session.calls == []
    assert exc.value.message == 'failed to marshal request body'


def test_nan_body_is_rejected(make_transport):
    session = FakeSession()
    t = make_transport(session)
    with pytest.raises(ValidationError):
        t.submit('/sensors', {'temperature': float('nan')})
    assert session.calls == []


def test_control_characters_in_path_are_rejected(make_transport):
    session = FakeSession()
    t = make_transport(session)
    with pytest.raises(ValidationError):
        t.fetch('/ui/layout/abc\r\nX-Injected: 1')
    assert session.calls == []


def test_malformed_url_from_engine_is_validation_error(make_transport, waits):
    session = FakeSession(requests.exceptions.InvalidURL('bad host'))
    t = make_transport(session)
    with pytest.raises(ValidationError):
        t.fetch('/ui/scenes')
    assert len(session.calls) == 1
    assert waits.delays == []


def test_empty_success_body_leaves_result_none(make_transport):
    session = FakeSession(FakeResponse(204, b''))
    t = make_transport(session)
    assert t.fetch('/ui/quota', into=dict) is None


def test_success_without_decoder_ignores_body(make_transport):
    session = FakeSession(FakeResponse(200, 'not json at all'))
    t = make_transport(session)
    assert t.submit('/sensors', {'id': 'a'}) is None
    assert len(session.calls) == 1


def test_undecodable_success_body_is_internal_error_and_retried(make_transport, waits):
    session = FakeSession(FakeResponse(200, 'not json'))
    t = make_transport(session)
    with pytest.raises(InternalServerError) as exc:
        t.fetch('/ui/quota', into=dict)
    assert exc.value.status_code is None
    assert exc.value.message == 'failed to parse response'
    assert len(session.calls) == 4


def test_decoder_receives_parsed_json(make_transport):
    session = FakeSession(FakeResponse(200, [{'id': 1}, {'id': 2}]))
    t = make_transport(session)
    assert t.fetch('/ui/scenes', into=lambda items: [i['id'] for i in items]) == [1, 2]


def test_request_line_and_headers(make_transport):
    session = FakeSession(FakeResponse(200, b''))
    t = make_transport(session, token='tok-1', timeout=12.5)
    t.replace('ui/presets/p1', {'name': 'Top'})
    call = session.calls[0]
    assert call['method'] == 'PUT'
    assert call['url'] == 'https://api.example.test/ui/presets/p1'
    assert call['timeout'] == 12.5
    assert call['headers']['Content-Type'] == 'application/json'
    assert call['headers']['Accept'] == 'application/json'
    assert call['headers']['Authorization'] == 'Bearer tok-1'
    assert 'X-Admin-Token' not in call['headers']
    assert session.body() == {'name': 'Top'}


def test_admin_token_header_only(make_transport):
    session = FakeSession(FakeResponse(200, b''))
    t = make_transport(session, admin_token='s3cret')
    t.fetch('/api/health')
    headers = session.calls[0]['headers']
    assert headers['X-Admin-Token'] == 's3cret'
    assert 'Authorization' not in headers


def test_get_and_delete_send_no_body(make_transport):
    session = FakeSession(FakeResponse(200, b''))
    t = make_transport(session)
    t.fetch('/ui/scenes')
    t.remove('/ui/layout/1')
    assert [c['method'] for c in session.calls] == ['GET', 'DELETE']
    assert all(c['data'] is None for c in session.calls)


def test_patch_verb(make_transport):
    session = FakeSession(FakeResponse(200, b''))
    t = make_transport(session)
    t.amend('/workflow/w1/enabled', {'enabled': False})
    assert session.calls[0]['method'] == 'PATCH'
    assert session.body() == {'enabled': False}


def test_token_rotation_applies_to_next_request(make_transport):
    session = FakeSession(FakeResponse(200, b''))
    t = make_transport(session, token='old')
    t.fetch('/ui/scenes')
    t.set_token('new')
    t.fetch('/ui/scenes')
    t.set_token('')
    t.fetch('/ui/scenes')
    assert session.calls[0]['headers']['Authorization'] == 'Bearer old'
    assert session.calls[1]['headers']['Authorization'] == 'Bearer new'
    assert 'Authorization' not in session.calls[2]['headers']


def test_responses_are_closed(make_transport):
    first, second = FakeResponse(500), FakeResponse(200, {'a': 1})
    session = FakeSession(first, second)
    make_transport(session).fetch('/x', into=dict)
    assert first.closed and second.closed


def test_already_cancelled_context_sends_nothing(make_transport):
    session = FakeSession()
    ctx = CallContext()
    ctx.cancel()
    with pytest.raises(RequestTimeoutError) as exc:
        make_transport(session).fetch('/ui/scenes', ctx=ctx)
    assert session.calls == []
    assert exc.value.code is ErrorCode.TIMEOUT


def test_cancellation_interrupts_backoff():
    session = FakeSession(FakeResponse(500))
    t = Transport('https://api.example.test', session=session, retry_wait=30.0)
    ctx = CallContext()
    threading.Timer(0.05, ctx.cancel).start()
    started = time.monotonic()
    with pytest.raises(RequestTimeoutError):
        t.fetch('/ui/scenes', ctx=ctx)
    assert time.monotonic() - started < 5
    assert len(session.calls) == 1


def test_deadline_bounds_attempt_timeout_and_backoff():
    session = FakeSession(FakeResponse(500))
    t = Transport('https://api.example.test', session=session, retry_wait=30.0, timeout=30.0)
    ctx = CallContext.with_timeout(0.2)
    with pytest.raises(RequestTimeoutError) as exc:
        t.fetch('/ui/scenes', ctx=ctx)
    assert len(session.calls) == 1
    assert session.calls[0]['timeout'] <= 0.2
    assert isinstance(exc.value.cause, DeadlineExceeded)


def test_encode_body_handles_models_and_common_types():
    sensor_id = uuid.uuid4()

    @dataclass
    class Plain:
        name: str

    payload = {
        'sensor': SensorData(id=str(sensor_id), status=Status.ONLINE),
        'uuid': sensor_id,
        'plain': Plain('p'),
        'status': Status.WARNING,
    }
    decoded = json.loads(encode_body(payload))
    assert decoded['sensor'] == {'id': str(sensor_id), 'status': 'online'}
    assert decoded['uuid'] == str(sensor_id)
    assert decoded['plain'] == {'name': 'p'}
    assert decoded['status'] == 'warning'


def test_bad_request_keeps_message(make_transport):
    session = FakeSession(FakeResponse(400, {'message': 'grid too small'}))
    with pytest.raises(BadRequestError) as exc:
        make_transport(session).submit('/ui/layout', {'name': 'x'})
    assert str(exc.value) == 'bad_request: grid too small'


def test_null_success_body_leaves_result_none(make_transport, waits):
    session = FakeSession(FakeResponse(200, 'null'))
    t = make_transport(session)
    assert t.fetch('/ui/scenes', into=list) is None
    assert len(session.calls) == 1
    assert waits.delays == []


def test_any_decoder_failure_is_classified(make_transport):
    session = FakeSession(FakeResponse(200, [1, 2]))
    t = make_transport(session, max_retries=0)
    with pytest.raises(InternalServerError) as exc:
        t.fetch('/auth/login', into=lambda doc: doc.get('app_token'))
    assert isinstance(exc.value.cause, AttributeError)


def test_body_read_failure_is_network_error_and_retried(make_transport, waits):
    broken = FakeResponse(200, read_error=requests.exceptions.ChunkedEncodingError('connection cut'))
    session = FakeSession(broken, FakeResponse(200, {'a': 1}))
    t = make_transport(session)
    assert t.fetch('/ui/quota', into=dict) == {'a': 1}
    assert len(session.calls) == 2
    assert waits.delays == [1.0]
    assert broken.closed


def test_body_read_failure_exhaustion(make_transport):
    broken = FakeResponse(200, read_error=requests.exceptions.ChunkedEncodingError('connection cut'))
    session = FakeSession(broken)
    with pytest.raises(NetworkError) as exc:
        make_transport(session, max_retries=1).fetch('/ui/quota', into=dict)
    assert exc.value.message == 'failed to read response body'
    assert len(session.calls) == 2


def test_cancel_after_response_is_read_keeps_result(make_transport):
    session = FakeSession(FakeResponse(200, {'a': 1}))
    ctx = CallContext()

    def decode(doc):
        ctx.cancel()
        return doc

    assert make_transport(session).fetch('/ui/quota', into=decode, ctx=ctx) == {'a': 1}


class _SlowHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        self.server.release.wait(5)
        body = b'{}'
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_server():
    server = ThreadingHTTPServer(('127.0.0.1', 0), _SlowHandler)
    server.daemon_threads = True
    server.release = threading.Event()
    threading.Thread(target=server.serve_forever, daemon=True).start()
    yield f"http://127.0.0.1:{server.server_address[1]}", server.release
    server.release.set()
    server.shutdown()
    server.server_close()


def test_cancel_aborts_request_waiting_on_server(slow_server):
    url, _ = slow_server
    with requests.Session() as session:
        session.trust_env = False
        t = Transport(url, session=session, retry_wait=0.0)
        ctx = CallContext()
        threading.Timer(0.1, ctx.cancel).start()
        started = time.monotonic()
        with pytest.raises(RequestTimeoutError) as exc:
            t.fetch('/ui/scenes', into=dict, ctx=ctx)
        assert time.monotonic() - started < 2
        assert isinstance(exc.value.cause, CancelledError)


def test_live_context_gets_the_response(slow_server):
    url, release = slow_server
    release.set()
    with requests.Session() as session:
        session.trust_env = False
        t = Transport(url, session=session)
        assert t.fetch('/ui/scenes', into=dict, ctx=CallContext.with_timeout(10)) == {}


def test_debug_transport_does_not_touch_package_logger(caplog):
    package_logger = logging.getLogger('whooktown')
    before = package_logger.level
    session = FakeSession(FakeResponse(200, b''))
    t = Transport('https://api.example.test', session=session, debug=True)
    assert package_logger.level == before
    with caplog.at_level(logging.DEBUG, logger='whooktown'):
        t.fetch('/ui/scenes')
    assert 'GET /ui/scenes -> 200' in caplog.text
