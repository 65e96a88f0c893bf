from __future__ import annotations

from typing import Callable

import pytest

from alt.config import RunConfig, TargetConfig
from helpers import RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_config() -> Callable[..., RunConfig]:
    def factory(**overrides: object) -> RunConfig:
        params: dict[str, object] = {
            "target": TargetConfig(base_url="https://api.test", endpoint="/items"),
            "concurrency": 5,
            "total_requests": 10,
            "initial_delay_ms": 1000.0,
            "token": "secret",
        }
        params.update(overrides)
        return RunConfig(**params)

    return factory
