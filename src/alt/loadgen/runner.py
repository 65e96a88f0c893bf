from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

import httpx

from alt.config import LoadTestSettings, RunConfig
from alt.loadgen.auth import authenticate
from alt.loadgen.client import build_client
from alt.loadgen.dispatcher import dispatch_batch
from alt.loadgen.pacer import AdaptivePacer
from alt.metrics import RunStats, RunSummary, fold, summarize
from alt.storage import Storage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


def _new_run_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class RunController:
    """Drives one load run: dispatch a batch, fold its outcomes, pace, repeat.

    Stats and the pacer are only touched here, between batches, so nothing
    needs a lock.
    """

    config: RunConfig
    transport: httpx.AsyncBaseTransport | None = None
    sleep: SleepFunc = asyncio.sleep
    progress: ProgressCallback | None = None
    state: RunState = RunState.NOT_STARTED
    stats: RunStats | None = None
    run_id: str = ""

    def __post_init__(self) -> None:
        if not self.run_id:
            self.run_id = self.config.run_id or _new_run_id()

    async def run(self) -> RunSummary:
        if self.state is not RunState.NOT_STARTED:
            msg = f"Run {self.run_id} is already {self.state.value}"
            raise RuntimeError(msg)
        config = self.config
        if not config.token:
            logger.warning("Running load test without an authentication token")
        pacer = AdaptivePacer.from_config(config)
        stats = RunStats(current_delay_ms=pacer.delay_ms)
        self.stats = stats
        self.state = RunState.RUNNING
        logger.info(
            "Starting run %s: %d requests to %s %s, concurrency %d",
            self.run_id,
            config.total_requests,
            config.target.method,
            config.target.url,
            config.concurrency,
        )

        remaining = config.total_requests
        async with build_client(config.target, config.token, self.transport) as client:
            stats.started_at = time.perf_counter()
            while remaining > 0:
                batch_size = min(config.concurrency, remaining)
                outcomes = await dispatch_batch(client, config.target, batch_size)
                stats.ended_at = time.perf_counter()
                stats.batches += 1
                hits = sum(fold(stats, outcome) for outcome in outcomes)
                pacer.observe_batch(hits)
                stats.current_delay_ms = pacer.delay_ms
                remaining -= batch_size
                logger.debug(
                    "Batch %d settled: %d requests, %d remaining",
                    stats.batches,
                    batch_size,
                    remaining,
                )
                if self.progress:
                    await self.progress(config.total_requests - remaining, config.total_requests)
                if remaining > 0:
                    stats.sleeps += 1
                    await self.sleep(pacer.delay_sec)

        self.state = RunState.COMPLETED
        summary = summarize(stats, config, self.run_id)
        logger.info(
            "Run %s completed: %d ok, %d failed in %.2f s",
            self.run_id,
            summary.success_count,
            summary.failure_count,
            summary.duration_sec,
        )
        return summary


async def run_load_test(
    config: RunConfig,
    storage: Storage | None = None,
    progress: ProgressCallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> RunSummary:
    controller = RunController(config, transport=transport, sleep=sleep, progress=progress)
    if storage is not None and storage.run_exists(controller.run_id):
        msg = f"Run {controller.run_id} already exists"
        raise ValueError(msg)
    summary = await controller.run()
    if storage is not None:
        storage.save_run(config, summary)
    return summary


async def run_authenticated(
    settings: LoadTestSettings,
    storage: Storage | None = None,
    progress: ProgressCallback | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    login_transport: httpx.BaseTransport | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> RunSummary:
    """Log in (when credentials are configured), then run the load test.

    Raises AuthenticationError before any load request when no token can be
    obtained.
    """
    config = await asyncio.to_thread(authenticate, settings, login_transport)
    return await run_load_test(
        config,
        storage=storage,
        progress=progress,
        transport=transport,
        sleep=sleep,
    )
