"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from calorie_tracker.adapters.memory_store import InMemoryKeyValueStore
from calorie_tracker.config import Settings
from calorie_tracker.domain.models import MealEntry, MealPreset
from calorie_tracker.services.cache import InMemoryCache
from calorie_tracker.services.datastore import DatastoreService, KeyValueStore


def make_entry(
    name: str = "eggs",
    time: str = "08:00",
    servings: float = 1,
    kcal_per_serving: float = 100,
) -> MealEntry:
    return MealEntry(
        time=time, name=name, servings=servings, kcal_per_serving=kcal_per_serving
    )


def make_preset(
    preset_id: str = "1",
    name: str = "A",
    kcal_per_serving: float = 50,
    usage_count: int | None = None,
    last_usage_time: int | None = None,
) -> MealPreset:
    return MealPreset(
        id=preset_id,
        name=name,
        kcal_per_serving=kcal_per_serving,
        usage_count=usage_count,
        last_usage_time=last_usage_time,
    )


@dataclass
class FailingKeyValueStore(KeyValueStore):
    """Key/value store whose reads and/or writes raise."""

    fail_reads: bool = True
    fail_writes: bool = True
    items: dict[str, str] = field(default_factory=dict)

    async def get_item(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("storage unavailable")
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("storage unavailable")
        self.items.pop(key, None)

    async def get_all_keys(self) -> list[str]:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return list(self.items)


@dataclass
class CountingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that counts reads and yields to the loop on each call."""

    reads: int = 0

    async def get_item(self, key: str) -> str | None:
        self.reads += 1
        await asyncio.sleep(0)
        return await super().get_item(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        await super().set_item(key, value)


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", storage_prefix="@test")


@pytest.fixture
def store() -> CountingKeyValueStore:
    return CountingKeyValueStore()


@pytest.fixture
def datastore_service(store: CountingKeyValueStore) -> DatastoreService:
    return DatastoreService(store=store, cache=InMemoryCache(), prefix="@test")
