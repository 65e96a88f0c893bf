from __future__ import annotations

from alt.config.loader import load_config, settings_from_mapping
from alt.config.models import (
    AuthConfig,
    ConfigurationError,
    LoadTestSettings,
    RateLimitPolicy,
    RunConfig,
    TargetConfig,
)

__all__ = [
    "AuthConfig",
    "ConfigurationError",
    "LoadTestSettings",
    "RateLimitPolicy",
    "RunConfig",
    "TargetConfig",
    "load_config",
    "settings_from_mapping",
]
