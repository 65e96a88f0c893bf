from __future__ import annotations

import logging
from dataclasses import dataclass

from alt.config import RateLimitPolicy, RunConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AdaptivePacer:
    delay_ms: float
    multiplier: float = 1.5
    max_delay_ms: float | None = None
    policy: RateLimitPolicy = RateLimitPolicy.PER_BATCH

    @classmethod
    def from_config(cls, config: RunConfig) -> AdaptivePacer:
        return cls(
            delay_ms=config.initial_delay_ms,
            multiplier=config.backoff_multiplier,
            max_delay_ms=config.max_delay_ms,
            policy=config.rate_limit_policy,
        )

    @property
    def delay_sec(self) -> float:
        return self.delay_ms / 1000.0

    def observe_batch(self, hits: int) -> int:
        """Apply the backoff rule for one settled batch that saw ``hits``
        rate-limit responses. Returns how many times the delay grew."""
        if hits <= 0:
            return 0
        steps = 1 if self.policy is RateLimitPolicy.PER_BATCH else hits
        for _ in range(steps):
            self.increase()
        return steps

    def increase(self) -> None:
        delay = self.delay_ms * self.multiplier
        if self.max_delay_ms is not None:
            delay = min(delay, self.max_delay_ms)
        self.delay_ms = delay
        logger.info("Rate limited, increasing inter-batch delay to %.3f s", self.delay_sec)
