from __future__ import annotations

import asyncio
import json

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from alt.analysis import compare_runs, default_pair
from alt.config import (
    AuthConfig,
    ConfigurationError,
    LoadTestSettings,
    RateLimitPolicy,
    RunConfig,
    TargetConfig,
)
from alt.loadgen.auth import AuthenticationError
from alt.loadgen.runner import run_authenticated
from alt.metrics import RunSummary
from alt.storage import default_storage


st.set_page_config(page_title="API Load Tester", layout="wide")

storage = default_storage()


@st.cache_data
def _load_runs() -> pd.DataFrame:
    return storage.list_runs()


def _render_header() -> None:
    st.title("API Load Tester")
    st.caption("Batched load runs with adaptive pacing against authenticated HTTP APIs.")


def _build_settings() -> LoadTestSettings:
    with st.sidebar:
        st.header("Target")
        base_url = st.text_input("Base URL", "https://httpbin.org")
        endpoint = st.text_input("Endpoint", "/get")
        method = st.selectbox("Method", ["GET", "POST", "PUT", "PATCH", "DELETE"])
        body_text = st.text_area("JSON body", "") if method != "GET" else ""
        verify_tls = st.checkbox("Verify TLS", value=True)

        st.header("Authentication")
        login_endpoint = st.text_input("Login endpoint", "/api/login")
        email = st.text_input("Email", "")
        password = st.text_input("Password", "", type="password")
        token = st.text_input("Token (skips login)", "", type="password")

        st.header("Load")
        concurrency = st.slider("Concurrency", 1, 200, 5)
        total = st.number_input("Total requests", min_value=1, value=50)
        delay_ms = st.number_input("Initial delay (ms)", min_value=0, value=1000)
        max_delay_ms = st.number_input("Max delay (ms, 0 = none)", min_value=0, value=0)
        policy = st.selectbox("429 policy", [p.value for p in RateLimitPolicy])
        notes = st.text_input("Notes", "")

    body = json.loads(body_text) if body_text.strip() else None
    target = TargetConfig(
        base_url=base_url,
        endpoint=endpoint,
        method=method,
        body=body,
        verify_tls=verify_tls,
    )
    run = RunConfig(
        target=target,
        concurrency=concurrency,
        total_requests=int(total),
        initial_delay_ms=float(delay_ms),
        max_delay_ms=float(max_delay_ms) if max_delay_ms else None,
        rate_limit_policy=RateLimitPolicy(policy),
        notes=notes,
    )
    auth = AuthConfig(
        login_endpoint=login_endpoint,
        email=email or None,
        password=password or None,
        token=token or None,
    )
    return LoadTestSettings(auth=auth, run=run)


def _run_button(settings: LoadTestSettings) -> None:
    if st.sidebar.button("Start run"):
        progress = st.sidebar.progress(0, text="Running...")

        async def on_progress(done: int, total: int) -> None:
            progress.progress(min(1.0, done / total))

        try:
            summary = asyncio.run(run_authenticated(settings, storage=storage, progress=on_progress))
        except AuthenticationError as exc:
            st.sidebar.error(f"Authentication failed: {exc}")
            return
        st.sidebar.success(f"Run completed: {summary.run_id}")
        st.cache_data.clear()


def _plot_outcomes(summary: RunSummary) -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=["success", "failure", "rate limited"],
            y=[summary.success_count, summary.failure_count, summary.rate_limited_count],
        )
    )
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10))
    return fig


def _plot_latency(summary: RunSummary) -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=["avg", "p50", "p95", "p99"],
            y=[summary.avg_latency_ms, summary.p50_ms, summary.p95_ms, summary.p99_ms],
        )
    )
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10), yaxis_title="ms")
    return fig


def _plot_history(runs: pd.DataFrame) -> go.Figure:
    history = runs.sort_values("created_at")
    fig = px.line(
        history,
        x="created_at",
        y="requests_per_sec",
        markers=True,
        hover_data=["run_id", "concurrency", "failure_count"],
        title="Throughput across runs",
    )
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10))
    return fig


def _render_run_view(run_id: str) -> None:
    summary = storage.load_summary(run_id)
    meta = storage.load_run_meta(run_id) or {}
    st.subheader(f"Run {run_id}")
    st.caption(str(meta.get("notes", "")))
    if summary is None:
        st.info("No summary stored for this run")
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Requests/s", f"{summary.requests_per_sec:.2f}")
    col2.metric("Failures", summary.failure_count)
    col3.metric("Duration (s)", f"{summary.duration_sec:.2f}")
    col4.metric("Final delay (s)", f"{summary.final_delay_sec:g}")

    left, right = st.columns(2)
    with left:
        st.plotly_chart(_plot_outcomes(summary), use_container_width=True)
    with right:
        st.plotly_chart(_plot_latency(summary), use_container_width=True)


def _render_comparison(runs: pd.DataFrame) -> None:
    run_ids = runs["run_id"].tolist()
    if len(run_ids) < 2:
        return
    st.subheader("Run Comparison")
    base_idx, cand_idx = default_pair(run_ids)
    base = st.selectbox("Baseline run", run_ids, index=base_idx)
    candidate = st.selectbox("Candidate run", run_ids, index=cand_idx)
    if base == candidate:
        st.info("Select two different runs for comparison")
        return
    base_summary = storage.load_summary(base)
    cand_summary = storage.load_summary(candidate)
    if base_summary is None or cand_summary is None:
        return
    regressions = compare_runs(base_summary, cand_summary)
    if not regressions:
        st.success("No regressions detected")
    else:
        for reg in regressions:
            st.error(f"{reg.message} ({reg.delta_pct:.1f}% on {reg.metric})")


def main() -> None:
    _render_header()
    try:
        settings = _build_settings()
    except (ConfigurationError, json.JSONDecodeError) as exc:
        st.sidebar.error(str(exc))
        settings = None
    if settings is not None:
        _run_button(settings)

    runs = _load_runs()
    if runs.empty:
        st.info("No runs yet. Start one from the sidebar.")
        return
    st.plotly_chart(_plot_history(runs), use_container_width=True)
    selected_run = st.selectbox("Select run", runs["run_id"].tolist())
    _render_run_view(selected_run)
    _render_comparison(runs)


if __name__ == "__main__":
    main()
