from __future__ import annotations

from dataclasses import dataclass

from alt.metrics import RunSummary


@dataclass(frozen=True, slots=True)
class Regression:
    metric: str
    delta_pct: float
    message: str


def compare_runs(base: RunSummary, candidate: RunSummary) -> list[Regression]:
    regressions: list[Regression] = []
    if base.p95_ms > 0:
        delta = (candidate.p95_ms - base.p95_ms) / base.p95_ms
        if delta > 0.2:
            regressions.append(
                Regression(
                    metric="p95_ms",
                    delta_pct=delta * 100,
                    message="p95 latency increased materially",
                )
            )
    if base.failure_rate > 0:
        delta = (candidate.failure_rate - base.failure_rate) / base.failure_rate
        if delta > 0.3:
            regressions.append(
                Regression(
                    metric="failure_rate",
                    delta_pct=delta * 100,
                    message="failure rate regression detected",
                )
            )
    elif candidate.failure_rate > 0:
        regressions.append(
            Regression(
                metric="failure_rate",
                delta_pct=float("inf"),
                message="failures appeared where the baseline had none",
            )
        )
    if base.requests_per_sec > 0:
        delta = (base.requests_per_sec - candidate.requests_per_sec) / base.requests_per_sec
        if delta > 0.2:
            regressions.append(
                Regression(
                    metric="requests_per_sec",
                    delta_pct=delta * 100,
                    message="throughput regression detected",
                )
            )
    return regressions


def default_pair(run_ids: list[str]) -> tuple[int, int]:
    """Indexes of the (baseline, candidate) runs in a newest-first listing:
    the previous run is the baseline, the latest is the candidate."""
    if len(run_ids) < 2:
        msg = "Need at least two runs to compare"
        raise ValueError(msg)
    return 1, 0
