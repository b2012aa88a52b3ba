"""Supabase-backed key/value store."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from calorie_tracker.services.datastore import KeyValueStore

DEFAULT_TABLE = "kv_store"


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores each document as a row of a ``key``/``value`` table.

    The Supabase client is synchronous, so calls run in a worker thread.
    """

    client: Client
    table: str = DEFAULT_TABLE

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key."""
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return str(value) if value is not None else None

    async def set_item(self, key: str, value: str) -> None:
        """Insert or update the row for a key."""
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table)
            .upsert({"key": key, "value": value}, on_conflict="key")
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store {key}")

    async def remove_item(self, key: str) -> None:
        """Delete the row for a key."""
        await asyncio.to_thread(
            lambda: self.client.table(self.table).delete().eq("key", key).execute()
        )

    async def get_all_keys(self) -> list[str]:
        """Return every stored key."""
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table).select("key").execute()
        )
        return [str(row["key"]) for row in response.data or []]
