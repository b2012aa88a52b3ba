"""In-memory key/value store."""

from dataclasses import dataclass, field

from calorie_tracker.services.datastore import KeyValueStore


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Key/value store kept in a dict, for local runs and tests."""

    items: dict[str, str] = field(default_factory=dict)

    async def get_item(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        """Store a value."""
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        """Delete a key if present."""
        self.items.pop(key, None)

    async def get_all_keys(self) -> list[str]:
        """Return every stored key."""
        return list(self.items)
