from __future__ import annotations

from alt.metrics.aggregator import classify, fold, summarize
from alt.metrics.models import (
    ErrorType,
    OutcomeKind,
    RATE_LIMIT_STATUS,
    RequestOutcome,
    RunStats,
    RunSummary,
)

__all__ = [
    "ErrorType",
    "OutcomeKind",
    "RATE_LIMIT_STATUS",
    "RequestOutcome",
    "RunStats",
    "RunSummary",
    "classify",
    "fold",
    "summarize",
]
