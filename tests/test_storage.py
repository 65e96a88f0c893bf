from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from alt.loadgen.runner import run_load_test
from alt.storage import Storage

from helpers import RecordingSleep, ScriptedTransport


def _run(config, storage):
    return asyncio.run(
        run_load_test(config, storage=storage, transport=ScriptedTransport([]), sleep=RecordingSleep())
    )


def test_summary_round_trip(tmp_path: Path, make_config) -> None:
    storage = Storage(tmp_path / "runs.duckdb")
    config = make_config(total_requests=4, concurrency=2, run_id="run-a", notes="baseline")
    summary = _run(config, storage)

    assert storage.run_exists("run-a")
    assert storage.load_summary("run-a") == summary
    meta = storage.load_run_meta("run-a")
    assert meta is not None
    assert meta["total_requests"] == 4
    assert meta["notes"] == "baseline"
    assert "secret" not in str(meta)

    runs = storage.list_runs()
    assert runs["run_id"].tolist() == ["run-a"]
    assert int(runs.loc[0, "success_count"]) == 4


def test_unknown_run(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "runs.duckdb")
    assert not storage.run_exists("nope")
    assert storage.load_summary("nope") is None
    assert storage.load_run_meta("nope") is None
    assert storage.list_runs().empty


def test_duplicate_run_id_is_rejected(tmp_path: Path, make_config) -> None:
    storage = Storage(tmp_path / "runs.duckdb")
    config = make_config(total_requests=1, run_id="dup")
    _run(config, storage)
    with pytest.raises(ValueError):
        _run(config, storage)
