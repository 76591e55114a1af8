"""
In-memory storage backend.

Used for local development and tests. Rows live in process memory and vanish
on restart; swap in ``SupabaseBackend`` for durable storage.
"""

import asyncio
import itertools
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from ..errors import BackendError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryBackend:
    """
    Dict-of-lists row store with server-assigned ``id`` and ``created_at``.

    All operations are serialized through an asyncio lock.
    """

    def __init__(self, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._lock = asyncio.Lock()
        self._sequence = itertools.count()

    async def insert(
        self, table: str, record: dict[str, Any], access_token: str | None = None
    ) -> dict[str, Any]:
        async with self._lock:
            row = dict(record)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = self._now()
            row["_seq"] = next(self._sequence)
            self._tables.setdefault(table, []).append(row)
            return _public(row)

    async def select(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str,
        descending: bool = True,
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        async with self._lock:
            rows = [
                row
                for row in self._tables.get(table, [])
                if all(row.get(field) == value for field, value in filters.items())
            ]
            try:
                rows.sort(key=lambda row: (row[order_by], row["_seq"]), reverse=descending)
            except KeyError as e:
                raise BackendError(f"Unknown column: {order_by}") from e
            return [_public(row) for row in rows]


def _public(row: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in row.items() if not key.startswith("_")}
