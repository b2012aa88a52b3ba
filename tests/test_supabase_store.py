"""Tests for the Supabase key/value store."""

import asyncio
from dataclasses import dataclass, field

import pytest

from calorie_tracker.adapters.supabase_store import SupabaseKeyValueStore


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_conflict: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, on_conflict: str = "") -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_supabase_store_reads_values() -> None:
    client = FakeSupabaseClient()
    table = client.table("kv_store")
    table.queue("select", [{"value": '{"01": []}'}])

    store = SupabaseKeyValueStore(client)  # type: ignore[arg-type]

    assert asyncio.run(store.get_item("@app/2024-05")) == '{"01": []}'
    assert asyncio.run(store.get_item("@app/2024-06")) is None
    assert table.last_filters == [("key", "@app/2024-05"), ("key", "@app/2024-06")]


def test_supabase_store_upserts_on_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("documents")
    table.queue("upsert", [{"key": "@app/PRESETS", "value": "[]"}])

    store = SupabaseKeyValueStore(client, table="documents")  # type: ignore[arg-type]
    asyncio.run(store.set_item("@app/PRESETS", "[]"))

    assert table.last_payload == {"key": "@app/PRESETS", "value": "[]"}
    assert table.last_conflict == "key"


def test_supabase_store_raises_when_upsert_returns_nothing() -> None:
    store = SupabaseKeyValueStore(FakeSupabaseClient())  # type: ignore[arg-type]

    with pytest.raises(RuntimeError, match="Failed to store"):
        asyncio.run(store.set_item("@app/SETTINGS", "{}"))


def test_supabase_store_lists_and_removes_keys() -> None:
    client = FakeSupabaseClient()
    table = client.table("kv_store")
    table.queue("select", [{"key": "@app/2024-05"}, {"key": "@app/PRESETS"}])

    store = SupabaseKeyValueStore(client)  # type: ignore[arg-type]
    keys = asyncio.run(store.get_all_keys())
    asyncio.run(store.remove_item("@app/2024-05"))

    assert keys == ["@app/2024-05", "@app/PRESETS"]
    assert table.last_filters == [("key", "@app/2024-05")]
