from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping

import httpx

from alt.config import LoadTestSettings, RunConfig
from alt.loadgen.client import DEFAULT_HEADERS

logger = logging.getLogger(__name__)

TOKEN_FIELDS = ("token", "access_token")


class AuthenticationError(RuntimeError):
    pass


def login(
    base_url: str,
    login_endpoint: str,
    credentials: Mapping[str, str],
    timeout_sec: float = 30.0,
    verify_tls: bool = True,
    transport: httpx.BaseTransport | None = None,
) -> str | None:
    """POST ``credentials`` to the login endpoint and return the bearer token.

    Any failure (transport error, non-JSON body, missing token field) yields
    None; the caller decides what to do about it.
    """
    url = base_url + login_endpoint
    try:
        with httpx.Client(
            headers=dict(DEFAULT_HEADERS),
            timeout=timeout_sec,
            verify=verify_tls,
            transport=transport,
        ) as client:
            resp = client.post(url, json=dict(credentials))
    except httpx.HTTPError as exc:
        logger.error("Login request to %s failed: %s", url, exc)
        return None
    try:
        data = resp.json()
    except ValueError:
        logger.error("Login response from %s is not JSON (status %s)", url, resp.status_code)
        return None
    if not isinstance(data, dict):
        return None
    for name in TOKEN_FIELDS:
        token = data.get(name)
        if token:
            return str(token)
    logger.error("Login response from %s carried no token (status %s)", url, resp.status_code)
    return None


def authenticate(
    settings: LoadTestSettings,
    transport: httpx.BaseTransport | None = None,
) -> RunConfig:
    """Resolve the bearer token and return the run config that carries it."""
    auth = settings.auth
    run = settings.run
    if auth.token:
        return replace(run, token=auth.token)
    if not auth.has_credentials():
        return run
    token = login(
        run.target.base_url,
        auth.login_endpoint,
        auth.credentials(),
        timeout_sec=run.target.timeout_sec,
        verify_tls=run.target.verify_tls,
        transport=transport,
    )
    if token is None:
        msg = f"Could not obtain a token from {run.target.base_url}{auth.login_endpoint}"
        raise AuthenticationError(msg)
    return replace(run, token=token)
