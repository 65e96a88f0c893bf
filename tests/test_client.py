from __future__ import annotations

import asyncio

import httpx
import pytest

from alt.config import TargetConfig
from alt.loadgen.client import build_client, request_headers, send_request
from alt.metrics import ErrorType, OutcomeKind

TARGET = TargetConfig(base_url="https://api.test", endpoint="/items")


def _send(handler, target: TargetConfig = TARGET):
    async def go():
        async with build_client(target, "tok", httpx.MockTransport(handler)) as client:
            return await send_request(client, target)

    return asyncio.run(go())


def test_success_records_timing_and_server_runtime() -> None:
    outcome = _send(lambda request: httpx.Response(200, headers={"X-Runtime": "0.125"}))
    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.status_code == 200
    assert outcome.elapsed_ms is not None and outcome.elapsed_ms >= 0
    assert outcome.server_time_ms == pytest.approx(125.0)


def test_unparseable_server_runtime_is_ignored() -> None:
    outcome = _send(lambda request: httpx.Response(200, headers={"X-Runtime": "soon"}))
    assert outcome.server_time_ms is None


def test_http_error_is_an_outcome() -> None:
    outcome = _send(lambda request: httpx.Response(429))
    assert outcome.kind is OutcomeKind.HTTP_FAILURE
    assert outcome.rate_limited


@pytest.mark.parametrize(
    "exc, error_type",
    [
        (httpx.ConnectTimeout("too slow"), ErrorType.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorType.CONNECT),
        (httpx.ReadError("reset"), ErrorType.READ),
        (httpx.RemoteProtocolError("garbage"), ErrorType.OTHER),
    ],
)
def test_transport_errors_never_raise(exc, error_type) -> None:
    def handler(request):
        raise exc

    outcome = _send(handler)
    assert outcome.kind is OutcomeKind.TRANSPORT_FAILURE
    assert outcome.status_code is None
    assert outcome.error_type is error_type
    assert outcome.error


def test_get_sends_no_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    _send(handler, TargetConfig(base_url="https://api.test", endpoint="/items", body={"x": 1}))
    assert seen[0].content == b""


def test_headers() -> None:
    target = TargetConfig(base_url="https://api.test", headers={"X-Tenant": "a"})
    headers = request_headers(target, "abc")
    assert headers["Authorization"] == "Bearer abc"
    assert headers["Content-Type"] == "application/json"
    assert headers["X-Tenant"] == "a"
    assert "Authorization" not in request_headers(target, None)
