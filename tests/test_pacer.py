from __future__ import annotations

import pytest

from alt.config import RateLimitPolicy
from alt.loadgen.pacer import AdaptivePacer


def test_no_hits_keeps_delay() -> None:
    pacer = AdaptivePacer(delay_ms=1000.0)
    assert pacer.observe_batch(0) == 0
    assert pacer.delay_sec == 1.0


def test_per_batch_counts_once() -> None:
    pacer = AdaptivePacer(delay_ms=1000.0)
    assert pacer.observe_batch(3) == 1
    assert pacer.delay_ms == pytest.approx(1500.0)


def test_per_response_compounds() -> None:
    pacer = AdaptivePacer(delay_ms=1000.0, policy=RateLimitPolicy.PER_RESPONSE)
    assert pacer.observe_batch(2) == 2
    assert pacer.delay_ms == pytest.approx(2250.0)


def test_zero_delay_stays_zero() -> None:
    pacer = AdaptivePacer(delay_ms=0.0)
    pacer.observe_batch(1)
    assert pacer.delay_ms == 0.0


def test_ceiling() -> None:
    pacer = AdaptivePacer(delay_ms=1000.0, max_delay_ms=1200.0)
    pacer.increase()
    pacer.increase()
    assert pacer.delay_ms == 1200.0


def test_from_config(make_config) -> None:
    config = make_config(initial_delay_ms=250.0, backoff_multiplier=2.0, max_delay_ms=900.0)
    pacer = AdaptivePacer.from_config(config)
    assert (pacer.delay_ms, pacer.multiplier, pacer.max_delay_ms) == (250.0, 2.0, 900.0)
    assert pacer.policy is RateLimitPolicy.PER_BATCH
