from __future__ import annotations

import json
from pathlib import Path

import pytest

from alt.config import ConfigurationError, RateLimitPolicy, load_config, settings_from_mapping


def _settings(**test_settings) -> dict:
    return {
        "api": {
            "base_url": "https://example-api.com",
            "endpoints": {"login": "/api/login", "endpoint": "/api/items"},
        },
        "auth": {"email": "example@email.com", "password": "secret"},
        "test_settings": {
            "concurrency": 5,
            "total_requests": 100,
            "delay_between_requests": 1000,
            **test_settings,
        },
    }


def test_load_config_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(_settings(method="post", body={"q": 1}, max_delay_ms=8000)))
    settings = load_config(path)
    assert settings.auth.login_endpoint == "/api/login"
    assert settings.auth.has_credentials()
    run = settings.run
    assert run.target.url == "https://example-api.com/api/items"
    assert run.target.method == "POST"
    assert run.target.body == {"q": 1}
    assert run.concurrency == 5
    assert run.total_requests == 100
    assert run.initial_delay_ms == 1000.0
    assert run.max_delay_ms == 8000.0
    assert run.rate_limit_policy is RateLimitPolicy.PER_BATCH
    assert run.token is None


def test_missing_section() -> None:
    data = _settings()
    del data["api"]
    with pytest.raises(ConfigurationError, match="api"):
        settings_from_mapping(data)


def test_missing_endpoint() -> None:
    data = _settings()
    data["api"]["endpoints"].pop("endpoint")
    with pytest.raises(ConfigurationError, match="endpoint"):
        settings_from_mapping(data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"total_requests": 0},
        {"concurrency": 0},
        {"concurrency": "many"},
        {"concurrency": 2.7},
        {"total_requests": True},
        {"total_requests": "10"},
        {"verify_tls": "false"},
        {"verify_tls": 0.0},
        {"verify_tls": "no"},
        {"rate_limit_policy": "sometimes"},
        {"delay_between_requests": 1000, "max_delay_ms": 10},
    ],
)
def test_invalid_test_settings(overrides) -> None:
    with pytest.raises(ConfigurationError):
        settings_from_mapping(_settings(**overrides))


def test_unreadable_and_malformed_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_config(bad)


def test_verify_tls_accepts_json_booleans() -> None:
    assert settings_from_mapping(_settings(verify_tls=False)).run.target.verify_tls is False
    assert settings_from_mapping(_settings()).run.target.verify_tls is True
