from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import duckdb
import pandas as pd

from alt.config import RunConfig
from alt.metrics import RunSummary


@dataclass(slots=True)
class Storage:
    """Run history: config metadata plus the aggregated summary of each run.

    Per-request outcomes are never written here.
    """

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def _init_schema(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS run_meta (
                    run_id TEXT PRIMARY KEY,
                    created_at TIMESTAMP,
                    config_json TEXT,
                    notes TEXT
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS run_summary (
                    run_id TEXT,
                    total_requests INTEGER,
                    concurrency INTEGER,
                    success_count INTEGER,
                    failure_count INTEGER,
                    rate_limited_count INTEGER,
                    batches INTEGER,
                    initial_delay_sec DOUBLE,
                    final_delay_sec DOUBLE,
                    duration_sec DOUBLE,
                    avg_latency_ms DOUBLE,
                    p50_ms DOUBLE,
                    p95_ms DOUBLE,
                    p99_ms DOUBLE,
                    avg_server_time_ms DOUBLE,
                    requests_per_sec DOUBLE
                );
                """
            )

    def run_exists(self, run_id: str) -> bool:
        with self._connect() as con:
            result = con.execute(
                "SELECT COUNT(*) FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            return bool(result and result[0] > 0)

    def save_run(self, config: RunConfig, summary: RunSummary) -> None:
        metadata = dict(config.to_metadata())
        metadata["run_id"] = summary.run_id
        config_json = json.dumps(metadata)
        with self._connect() as con:
            con.execute(
                "INSERT INTO run_meta VALUES (?, ?, ?, ?)",
                [summary.run_id, config.created_at, config_json, config.notes],
            )
            summary_df = pd.DataFrame([asdict(summary)])
            con.execute("INSERT INTO run_summary SELECT * FROM summary_df")

    def list_runs(self) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                """
                SELECT m.run_id, m.created_at, m.notes, s.total_requests, s.concurrency,
                       s.success_count, s.failure_count, s.p95_ms, s.requests_per_sec
                FROM run_meta m JOIN run_summary s ON m.run_id = s.run_id
                ORDER BY m.created_at DESC
                """
            ).fetchdf()

    def load_run_meta(self, run_id: str) -> dict[str, object] | None:
        with self._connect() as con:
            row = con.execute(
                "SELECT config_json FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            if not row:
                return None
            return json.loads(row[0])

    def load_summary(self, run_id: str) -> RunSummary | None:
        with self._connect() as con:
            df = con.execute(
                "SELECT * FROM run_summary WHERE run_id = ?",
                [run_id],
            ).fetchdf()
        if df.empty:
            return None
        row = df.iloc[0]
        values: dict[str, object] = {}
        for f in fields(RunSummary):
            value = row[f.name]
            values[f.name] = value.item() if hasattr(value, "item") else value
        return RunSummary(**values)
