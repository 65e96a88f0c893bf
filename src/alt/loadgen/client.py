from __future__ import annotations

import time
from typing import Mapping

import httpx

from alt.config import TargetConfig
from alt.metrics import ErrorType, OutcomeKind, RequestOutcome, classify

DEFAULT_HEADERS: Mapping[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}
SERVER_TIMING_HEADER = "X-Runtime"


def request_headers(target: TargetConfig, token: str | None) -> dict[str, str]:
    headers = dict(DEFAULT_HEADERS)
    headers.update(target.headers)
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_client(
    target: TargetConfig,
    token: str | None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=request_headers(target, token),
        timeout=target.timeout_sec,
        verify=target.verify_tls,
        transport=transport,
    )


async def send_request(client: httpx.AsyncClient, target: TargetConfig) -> RequestOutcome:
    start_mono = time.perf_counter()
    kwargs: dict[str, object] = {}
    if target.method != "GET" and target.body is not None:
        kwargs["json"] = target.body
    try:
        resp = await client.request(target.method, target.url, **kwargs)
    except httpx.TimeoutException as exc:
        return _transport_failure(ErrorType.TIMEOUT, exc)
    except httpx.ConnectError as exc:
        return _transport_failure(ErrorType.CONNECT, exc)
    except httpx.ReadError as exc:
        return _transport_failure(ErrorType.READ, exc)
    except httpx.HTTPError as exc:
        return _transport_failure(ErrorType.OTHER, exc)
    elapsed_ms = (time.perf_counter() - start_mono) * 1000.0
    return RequestOutcome(
        kind=classify(resp.status_code),
        status_code=resp.status_code,
        elapsed_ms=elapsed_ms,
        server_time_ms=_server_time_ms(resp.headers.get(SERVER_TIMING_HEADER)),
    )


def _transport_failure(error_type: ErrorType, exc: httpx.HTTPError) -> RequestOutcome:
    return RequestOutcome(
        kind=OutcomeKind.TRANSPORT_FAILURE,
        status_code=None,
        elapsed_ms=None,
        error_type=error_type,
        error=str(exc) or type(exc).__name__,
    )


def _server_time_ms(raw: str | None) -> float | None:
    # X-Runtime is reported in seconds.
    if not raw:
        return None
    try:
        return float(raw) * 1000.0
    except ValueError:
        return None
