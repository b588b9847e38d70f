"""
Store backend selection (STORE_BACKEND=postgres|memory).
"""

from __future__ import annotations

import os

from .memory_store import MemoryStore
from .pg_store import PgStore
from .resources import ALL_SCHEMAS
from .store import Store


def store_backend() -> str:
    return os.environ.get("STORE_BACKEND", "postgres").strip().lower() or "postgres"


def build_store(backend: str) -> Store:
    if backend == "postgres":
        return PgStore(ALL_SCHEMAS)
    if backend == "memory":
        return MemoryStore(ALL_SCHEMAS)
    raise RuntimeError(f"Unknown STORE_BACKEND {backend!r}.")
