from __future__ import annotations

from alt.report.console import render_summary

__all__ = ["render_summary"]
