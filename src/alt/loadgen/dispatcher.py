from __future__ import annotations

import asyncio

import httpx

from alt.config import TargetConfig
from alt.loadgen.client import send_request
from alt.metrics import RequestOutcome


async def dispatch_batch(
    client: httpx.AsyncClient,
    target: TargetConfig,
    batch_size: int,
) -> list[RequestOutcome]:
    """Fire ``batch_size`` requests at once and wait for all of them.

    The result order matches dispatch order, not completion order.
    """
    if batch_size < 1:
        msg = f"batch_size must be >= 1, got {batch_size}"
        raise ValueError(msg)
    tasks = [asyncio.create_task(send_request(client, target)) for _ in range(batch_size)]
    return list(await asyncio.gather(*tasks))
