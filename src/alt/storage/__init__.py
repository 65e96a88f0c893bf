from __future__ import annotations

from pathlib import Path

from alt.storage.duckdb_store import Storage


def default_storage() -> Storage:
    return Storage(Path(".alt/alt.duckdb"))


__all__ = ["Storage", "default_storage"]
