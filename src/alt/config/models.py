from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class ConfigurationError(ValueError):
    pass


class RateLimitPolicy(str, Enum):
    PER_BATCH = "per_batch"
    PER_RESPONSE = "per_response"


@dataclass(frozen=True, slots=True)
class TargetConfig:
    base_url: str
    endpoint: str = ""
    method: str = "GET"
    body: Any = None
    timeout_sec: float = 30.0
    verify_tls: bool = True
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return self.base_url + self.endpoint


@dataclass(frozen=True, slots=True)
class AuthConfig:
    login_endpoint: str = ""
    email: str | None = None
    password: str | None = None
    token: str | None = None

    def has_credentials(self) -> bool:
        return bool(self.email and self.password)

    def credentials(self) -> dict[str, str]:
        return {"email": self.email or "", "password": self.password or ""}


@dataclass(frozen=True, slots=True)
class RunConfig:
    target: TargetConfig
    concurrency: int = 5
    total_requests: int = 50
    initial_delay_ms: float = 1000.0
    token: str | None = None
    backoff_multiplier: float = 1.5
    max_delay_ms: float | None = None
    rate_limit_policy: RateLimitPolicy = RateLimitPolicy.PER_BATCH
    run_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str = ""

    def __post_init__(self) -> None:
        if self.total_requests < 1:
            msg = f"total_requests must be >= 1, got {self.total_requests}"
            raise ConfigurationError(msg)
        if self.concurrency < 1:
            msg = f"concurrency must be >= 1, got {self.concurrency}"
            raise ConfigurationError(msg)
        if self.initial_delay_ms < 0:
            msg = f"initial_delay_ms must be >= 0, got {self.initial_delay_ms}"
            raise ConfigurationError(msg)
        if self.backoff_multiplier < 1:
            msg = f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            raise ConfigurationError(msg)
        if self.max_delay_ms is not None and self.max_delay_ms < self.initial_delay_ms:
            msg = (
                f"max_delay_ms ({self.max_delay_ms}) must not be below "
                f"initial_delay_ms ({self.initial_delay_ms})"
            )
            raise ConfigurationError(msg)

    def to_metadata(self) -> Mapping[str, Any]:
        # Never persist the token.
        return {
            "run_id": self.run_id or "",
            "created_at": self.created_at.isoformat(),
            "concurrency": self.concurrency,
            "total_requests": self.total_requests,
            "initial_delay_ms": self.initial_delay_ms,
            "backoff_multiplier": self.backoff_multiplier,
            "max_delay_ms": self.max_delay_ms,
            "rate_limit_policy": self.rate_limit_policy.value,
            "authenticated": self.token is not None,
            "notes": self.notes,
            "target": {
                "base_url": self.target.base_url,
                "endpoint": self.target.endpoint,
                "method": self.target.method,
                "timeout_sec": self.target.timeout_sec,
                "verify_tls": self.target.verify_tls,
                "headers": dict(self.target.headers),
            },
        }


@dataclass(frozen=True, slots=True)
class LoadTestSettings:
    auth: AuthConfig
    run: RunConfig
