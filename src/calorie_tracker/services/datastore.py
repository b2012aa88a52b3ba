"""Cache-backed persistence for month data, presets and settings."""

import asyncio
import json
import logging
import re
import weakref
from dataclasses import dataclass, field
from typing import Protocol

from calorie_tracker.domain.dates import split_date_string
from calorie_tracker.domain.errors import DatastoreValidationError, StorageWriteError
from calorie_tracker.domain.models import (
    AppSettings,
    DataStore,
    Database,
    MealEntry,
    MealPreset,
    MonthData,
    with_default_settings,
)
from calorie_tracker.services.cache import Cache
from calorie_tracker.services.validation import (
    month_payload,
    parse_month_data,
    parse_presets,
    parse_settings,
    preset_payload,
    settings_payload,
)

DEFAULT_STORAGE_PREFIX = "@swiwa_calories"
PRESETS_KEY = "PRESETS"
SETTINGS_KEY = "SETTINGS"

_YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
_PRESETS_CACHE_KEY = "presets"

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Storage engine holding one text document per key."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a value under a key."""

    async def remove_item(self, key: str) -> None:
        """Delete a key if present."""

    async def get_all_keys(self) -> list[str]:
        """Return every stored key."""


@dataclass
class DatastoreService:
    """Read-through, write-through accessor for the calorie datastore.

    Storage layout::

        {prefix}/{YYYY-MM}: month document
        {prefix}/PRESETS:   preset list
        {prefix}/SETTINGS:  settings document

    Reads never raise: unreadable or corrupt documents are logged and
    replaced by empty defaults. Writes that fail raise ``StorageWriteError``.
    Edits to the same month are serialized so concurrent ``modify_entry``
    calls do not overwrite each other. Locks are kept per event loop, so one
    service can be driven by successive ``asyncio.run`` calls.
    """

    store: KeyValueStore
    cache: Cache
    prefix: str = DEFAULT_STORAGE_PREFIX
    _locks: weakref.WeakKeyDictionary[
        asyncio.AbstractEventLoop, dict[str, asyncio.Lock]
    ] = field(default_factory=weakref.WeakKeyDictionary, init=False, repr=False)
    _settings: AppSettings = field(default_factory=AppSettings, init=False, repr=False)

    # Month data

    async def get_month_data(self, year_month: str) -> MonthData:
        """Return the month document, served from cache when possible."""
        cached = self.cache.get(_month_cache_key(year_month))
        if isinstance(cached, dict):
            return _copy_month(cached)

        key = self._storage_key(year_month)
        try:
            raw = await self.store.get_item(key)
        except Exception:  # noqa: BLE001
            _logger.exception("Could not retrieve value for %s", key)
            return {}
        if raw is None:
            month: MonthData = {}
        else:
            try:
                month = parse_month_data(raw)
            except DatastoreValidationError as exc:
                _logger.error("Stored month %s is invalid: %s", year_month, exc)
                return {}
        self.cache.set(_month_cache_key(year_month), _copy_month(month))
        return month

    async def set_month_data(self, year_month: str, month: MonthData) -> None:
        """Replace a month document in the cache and in storage."""
        _logger.info("Setting the key %s with %s days", year_month, len(month))
        self.cache.set(_month_cache_key(year_month), _copy_month(month))
        await self._write(self._storage_key(year_month), json.dumps(month_payload(month)))

    async def modify_entry(
        self,
        date_string: str,
        original_name: str,
        original_time: str,
        entry: MealEntry | None,
    ) -> MonthData:
        """Delete, replace or append a meal entry and persist its month.

        The entry is located by ``(original_name, original_time)``. Passing
        ``None`` deletes it; otherwise a found entry is replaced in place and a
        missing one is appended to the day.

        Returns:
            The month document as persisted.

        Raises:
            ValueError: If ``date_string`` is not ``YYYY-MM-DD``.
        """
        year_month, day = split_date_string(date_string)
        async with self._lock_for(year_month):
            month = await self.get_month_data(year_month)
            entries = list(month.get(day, []))
            index = next(
                (
                    position
                    for position, existing in enumerate(entries)
                    if existing.name == original_name and existing.time == original_time
                ),
                None,
            )
            if entry is None:
                if index is None:
                    return month
                del entries[index]
            elif index is not None:
                entries[index] = entry
            else:
                entries.append(entry)
            month[day] = entries
            await self.set_month_data(year_month, month)
            return month

    # Presets

    async def get_presets(self) -> list[MealPreset]:
        """Return the saved presets, or an empty list if none are readable."""
        cached = self.cache.get(_PRESETS_CACHE_KEY)
        if isinstance(cached, list):
            return list(cached)

        key = self._storage_key(PRESETS_KEY)
        try:
            raw = await self.store.get_item(key)
        except Exception:  # noqa: BLE001
            _logger.exception("Could not retrieve value for %s", key)
            return []
        if raw is None:
            presets: list[MealPreset] = []
        else:
            try:
                presets = parse_presets(raw)
            except DatastoreValidationError as exc:
                _logger.error("Stored presets are invalid: %s", exc)
                return []
        self.cache.set(_PRESETS_CACHE_KEY, list(presets))
        return presets

    async def set_presets(self, presets: list[MealPreset]) -> None:
        """Replace the preset list in the cache and in storage."""
        _logger.info("Setting the presets with %s presets", len(presets))
        self.cache.set(_PRESETS_CACHE_KEY, list(presets))
        payload = [preset_payload(preset) for preset in presets]
        await self._write(self._storage_key(PRESETS_KEY), json.dumps(payload))

    # Settings

    async def get_settings(self) -> AppSettings:
        """Return settings with any newly introduced fields backfilled.

        When backfilling changed the document it is written back, so the
        stored copy always carries every known field.
        """
        key = self._storage_key(SETTINGS_KEY)
        try:
            raw = await self.store.get_item(key)
        except Exception:  # noqa: BLE001
            _logger.exception("Could not retrieve value for %s", key)
            return self._settings
        stored: object = {}
        settings = AppSettings()
        if raw is not None:
            try:
                stored = json.loads(raw)
                settings = parse_settings(raw)
            except (ValueError, DatastoreValidationError) as exc:
                _logger.error("Stored settings are invalid: %s", exc)
                stored = {}
        self._settings = settings
        if stored != settings_payload(settings):
            try:
                await self.set_settings(settings)
            except StorageWriteError:
                _logger.warning("Could not persist backfilled settings")
        return settings

    def get_settings_best_effort(self) -> AppSettings:
        """Return the last settings read or written, without touching storage."""
        return self._settings

    async def set_settings(self, settings: AppSettings) -> None:
        """Replace the settings document, filling unset fields from defaults."""
        settings = with_default_settings(settings)
        self._settings = settings
        await self._write(
            self._storage_key(SETTINGS_KEY), json.dumps(settings_payload(settings))
        )

    # Whole datastore

    async def get_all_known_data(self) -> DataStore:
        """Load every stored month together with presets and settings."""
        database: Database = {}
        for year_month in await self.list_months():
            database[year_month] = await self.get_month_data(year_month)
        return DataStore(
            database=database,
            presets=await self.get_presets(),
            settings=await self.get_settings(),
        )

    async def list_months(self) -> list[str]:
        """Return the year-month keys present in storage, oldest first."""
        try:
            keys = await self.store.get_all_keys()
        except Exception:  # noqa: BLE001
            _logger.exception("Could not list storage keys")
            return []
        months = []
        namespace = f"{self.prefix}/"
        for key in keys:
            if not key.startswith(namespace):
                continue
            year_month = key[len(namespace) :]
            if _YEAR_MONTH_PATTERN.match(year_month):
                months.append(year_month)
        return sorted(months)

    async def import_datastore(self, datastore: DataStore) -> None:
        """Write every month, the presets and the settings of a datastore."""
        _logger.info(
            "Importing %s months and %s presets",
            len(datastore.database),
            len(datastore.presets),
        )
        for year_month, month in datastore.database.items():
            async with self._lock_for(year_month):
                await self.set_month_data(year_month, month)
        await self.set_presets(datastore.presets)
        await self.set_settings(datastore.settings)

    async def replace_datastore(self, datastore: DataStore) -> None:
        """Import a datastore and drop stored months it does not contain."""
        for year_month in await self.list_months():
            if year_month in datastore.database:
                continue
            async with self._lock_for(year_month):
                self.cache.delete(_month_cache_key(year_month))
                await self._remove(self._storage_key(year_month))
        await self.import_datastore(datastore)

    # Storage helpers

    def _storage_key(self, name: str) -> str:
        return f"{self.prefix}/{name}"

    def _lock_for(self, year_month: str) -> asyncio.Lock:
        locks = self._locks.setdefault(asyncio.get_running_loop(), {})
        if year_month not in locks:
            locks[year_month] = asyncio.Lock()
        return locks[year_month]

    async def _write(self, key: str, value: str) -> None:
        try:
            await self.store.set_item(key, value)
        except Exception as exc:
            _logger.exception("Could not set value for %s", key)
            raise StorageWriteError(key) from exc

    async def _remove(self, key: str) -> None:
        try:
            await self.store.remove_item(key)
        except Exception as exc:
            _logger.exception("Could not remove value for %s", key)
            raise StorageWriteError(key) from exc


def _month_cache_key(year_month: str) -> str:
    return f"month:{year_month}"


def _copy_month(month: MonthData) -> MonthData:
    return {day: list(entries) for day, entries in month.items()}
