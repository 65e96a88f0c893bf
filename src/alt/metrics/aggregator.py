from __future__ import annotations

import logging

import numpy as np

from alt.config import RunConfig
from alt.metrics.models import OutcomeKind, RequestOutcome, RunStats, RunSummary

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200


def classify(status_code: int | None, error: BaseException | str | None = None) -> OutcomeKind:
    if status_code is None or error is not None:
        return OutcomeKind.TRANSPORT_FAILURE
    if status_code == SUCCESS_STATUS:
        return OutcomeKind.SUCCESS
    return OutcomeKind.HTTP_FAILURE


def fold(stats: RunStats, outcome: RequestOutcome) -> bool:
    """Fold one settled outcome into ``stats``.

    Returns True when the outcome is a rate-limit response, leaving the
    decision about the delay to the caller.
    """
    if outcome.kind is OutcomeKind.SUCCESS:
        stats.success_count += 1
        stats.latencies_ms.append(outcome.elapsed_ms or 0.0)
        stats.server_times_ms.append(outcome.server_time_ms or 0.0)
        return False
    stats.failure_count += 1
    if outcome.kind is OutcomeKind.HTTP_FAILURE:
        logger.warning("Request failed with status %s", outcome.status_code)
        if outcome.rate_limited:
            stats.rate_limited_count += 1
            return True
        return False
    logger.warning("Request error (%s): %s", _error_label(outcome), outcome.error)
    return False


def summarize(stats: RunStats, config: RunConfig, run_id: str) -> RunSummary:
    if stats.started_at is None or stats.ended_at is None:
        msg = "Cannot summarize a run that has not completed"
        raise ValueError(msg)
    duration = stats.ended_at - stats.started_at
    latencies = stats.latencies_ms
    if latencies:
        avg = float(np.mean(latencies))
        p50 = float(np.percentile(latencies, 50))
        p95 = float(np.percentile(latencies, 95))
        p99 = float(np.percentile(latencies, 99))
    else:
        avg = p50 = p95 = p99 = 0.0
    server_avg = float(np.mean(stats.server_times_ms)) if stats.server_times_ms else 0.0
    rps = config.total_requests / duration if duration > 0 else 0.0
    return RunSummary(
        run_id=run_id,
        total_requests=config.total_requests,
        concurrency=config.concurrency,
        success_count=stats.success_count,
        failure_count=stats.failure_count,
        rate_limited_count=stats.rate_limited_count,
        batches=stats.batches,
        initial_delay_sec=config.initial_delay_ms / 1000.0,
        final_delay_sec=stats.current_delay_ms / 1000.0,
        duration_sec=duration,
        avg_latency_ms=avg,
        p50_ms=p50,
        p95_ms=p95,
        p99_ms=p99,
        avg_server_time_ms=server_avg,
        requests_per_sec=rps,
    )


def _error_label(outcome: RequestOutcome) -> str:
    return outcome.error_type.value if outcome.error_type else "unknown"
