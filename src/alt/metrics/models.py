from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

RATE_LIMIT_STATUS = 429


class ErrorType(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    READ = "read"
    OTHER = "other"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    HTTP_FAILURE = "http_failure"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    kind: OutcomeKind
    status_code: int | None
    elapsed_ms: float | None
    server_time_ms: float | None = None
    error_type: ErrorType | None = None
    error: str | None = None

    @property
    def rate_limited(self) -> bool:
        return self.status_code == RATE_LIMIT_STATUS


@dataclass(slots=True)
class RunStats:
    current_delay_ms: float
    success_count: int = 0
    failure_count: int = 0
    rate_limited_count: int = 0
    batches: int = 0
    sleeps: int = 0
    latencies_ms: list[float] = field(default_factory=list)
    server_times_ms: list[float] = field(default_factory=list)
    started_at: float | None = None
    ended_at: float | None = None

    @property
    def completed(self) -> int:
        return self.success_count + self.failure_count


@dataclass(frozen=True, slots=True)
class RunSummary:
    run_id: str
    total_requests: int
    concurrency: int
    success_count: int
    failure_count: int
    rate_limited_count: int
    batches: int
    initial_delay_sec: float
    final_delay_sec: float
    duration_sec: float
    avg_latency_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float
    avg_server_time_ms: float
    requests_per_sec: float

    @property
    def failure_rate(self) -> float:
        return self.failure_count / max(1, self.total_requests)
