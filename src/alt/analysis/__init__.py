from __future__ import annotations

from alt.analysis.compare import Regression, compare_runs, default_pair

__all__ = ["Regression", "compare_runs", "default_pair"]
