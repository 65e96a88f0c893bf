from __future__ import annotations

from alt.metrics import RunSummary


def render_summary(summary: RunSummary) -> str:
    lines = [
        "=== Load Test Results ===",
        f"Run id: {summary.run_id}",
        f"Total requests: {summary.total_requests}",
        f"Concurrency: {summary.concurrency}",
        f"Delay between batches: {summary.final_delay_sec:g} seconds",
        f"Successful requests: {summary.success_count}",
        f"Failed requests: {summary.failure_count}",
        f"Rate limited responses: {summary.rate_limited_count}",
        f"Total execution time: {summary.duration_sec:.2f} seconds",
        f"Average time per request: {summary.avg_latency_ms:.2f} ms",
        f"p95 latency: {summary.p95_ms:.2f} ms",
    ]
    if summary.avg_server_time_ms > 0:
        lines.append(f"Average server runtime: {summary.avg_server_time_ms:.2f} ms")
    lines.append(f"Requests per second: {summary.requests_per_sec:.2f}")
    return "\n".join(lines)
