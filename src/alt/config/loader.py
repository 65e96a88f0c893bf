from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from alt.config.models import (
    AuthConfig,
    ConfigurationError,
    LoadTestSettings,
    RateLimitPolicy,
    RunConfig,
    TargetConfig,
)


def load_config(path: Path) -> LoadTestSettings:
    """Read a JSON settings file.

    The layout follows the classic ``api`` / ``auth`` / ``test_settings``
    sections::

        {
            "api": {"base_url": "...", "endpoints": {"login": "...", "endpoint": "..."}},
            "auth": {"email": "...", "password": "..."},
            "test_settings": {"concurrency": 5, "total_requests": 100,
                              "delay_between_requests": 1000}
        }
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigurationError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Config file {path} is not valid JSON: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a JSON object"
        raise ConfigurationError(msg)
    return settings_from_mapping(data)


def settings_from_mapping(data: Mapping[str, Any]) -> LoadTestSettings:
    api = _section(data, "api")
    endpoints = _section(api, "endpoints")
    auth = data.get("auth") or {}
    tests = _section(data, "test_settings")

    target = TargetConfig(
        base_url=_require(api, "base_url", "api"),
        endpoint=_require(endpoints, "endpoint", "api.endpoints"),
        method=str(tests.get("method", "GET")).upper(),
        body=tests.get("body"),
        timeout_sec=float(tests.get("timeout_sec", 30.0)),
        verify_tls=_flag(tests, "verify_tls", True),
        headers=dict(tests.get("headers") or {}),
    )
    auth_config = AuthConfig(
        login_endpoint=endpoints.get("login", ""),
        email=auth.get("email"),
        password=auth.get("password"),
        token=auth.get("token"),
    )
    max_delay = tests.get("max_delay_ms")
    try:
        policy = RateLimitPolicy(tests.get("rate_limit_policy", RateLimitPolicy.PER_BATCH.value))
    except ValueError as exc:
        msg = f"Unknown rate_limit_policy: {tests.get('rate_limit_policy')!r}"
        raise ConfigurationError(msg) from exc
    try:
        run = RunConfig(
            target=target,
            concurrency=_count(tests, "concurrency", 5),
            total_requests=_count(tests, "total_requests", 50),
            initial_delay_ms=float(tests.get("delay_between_requests", 1000)),
            backoff_multiplier=float(tests.get("backoff_multiplier", 1.5)),
            max_delay_ms=float(max_delay) if max_delay is not None else None,
            rate_limit_policy=policy,
            notes=str(tests.get("notes", "")),
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as exc:
        msg = f"Invalid test_settings value: {exc}"
        raise ConfigurationError(msg) from exc
    return LoadTestSettings(auth=auth_config, run=run)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        msg = f"Missing config section: {key}"
        raise ConfigurationError(msg)
    return value


def _require(section: Mapping[str, Any], key: str, where: str) -> str:
    value = section.get(key)
    if not value:
        msg = f"Missing config value: {where}.{key}"
        raise ConfigurationError(msg)
    return str(value)


def _flag(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        msg = f"test_settings.{key} must be true or false, got {value!r}"
        raise ConfigurationError(msg)
    return value


def _count(section: Mapping[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    # bool is an int subclass.
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"test_settings.{key} must be an integer, got {value!r}"
        raise ConfigurationError(msg)
    return value
