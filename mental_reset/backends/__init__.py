"""
Storage backends for saved sessions.

A backend is a row store addressed by table name. The gateway issues exactly
one ``insert`` per save and one filtered, ordered ``select`` per listing.
"""

from typing import Any, Protocol

from .memory import InMemoryBackend
from .supabase import SupabaseBackend

Row = dict[str, Any]


class StorageBackend(Protocol):
    async def insert(
        self, table: str, record: Row, access_token: str | None = None
    ) -> Row: ...

    async def select(
        self,
        table: str,
        filters: Row,
        order_by: str,
        descending: bool = True,
        access_token: str | None = None,
    ) -> list[Row]: ...


__all__ = ["InMemoryBackend", "Row", "StorageBackend", "SupabaseBackend"]
