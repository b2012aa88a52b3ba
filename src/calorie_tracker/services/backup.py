"""Export and import of the whole datastore as a JSON backup."""

import logging
from dataclasses import dataclass
from enum import Enum

from calorie_tracker.domain.models import DataStore
from calorie_tracker.services.datastore import DatastoreService
from calorie_tracker.services.merge import merge_datastores
from calorie_tracker.services.validation import dump_datastore, validate_datastore

_logger = logging.getLogger(__name__)


class ImportStrategy(Enum):
    """How an imported backup is combined with local data."""

    AUTO = "auto"
    REPLACE = "replace"
    MERGE_PREFER_EXISTING = "merge_prefer_existing"
    MERGE_PREFER_IMPORTED = "merge_prefer_imported"


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of an import."""

    months: int
    presets: int
    merged: bool


@dataclass
class BackupService:
    """Application service for backup and restore."""

    datastore: DatastoreService

    async def export_json(self) -> str:
        """Serialize everything currently stored."""
        store = await self.datastore.get_all_known_data()
        return dump_datastore(store)

    async def import_json(
        self, json_text: str, strategy: ImportStrategy = ImportStrategy.AUTO
    ) -> ImportSummary:
        """Validate a backup and write it to storage.

        ``AUTO`` replaces local data when there is none worth keeping and
        otherwise merges, preferring what is already stored.

        Raises:
            DatastoreValidationError: If the backup does not match the schema.
        """
        imported = validate_datastore(json_text)
        if strategy is ImportStrategy.REPLACE:
            return await self._replace(imported)

        existing = await self.datastore.get_all_known_data()
        if strategy is ImportStrategy.AUTO:
            if not has_content(existing):
                return await self._replace(imported)
            strategy = ImportStrategy.MERGE_PREFER_EXISTING

        if strategy is ImportStrategy.MERGE_PREFER_EXISTING:
            merged = merge_datastores(existing, imported)
        else:
            merged = merge_datastores(imported, existing)
        await self.datastore.import_datastore(merged)
        _logger.info(
            "Merged backup: months=%s presets=%s strategy=%s",
            len(merged.database),
            len(merged.presets),
            strategy.value,
        )
        return ImportSummary(
            months=len(merged.database), presets=len(merged.presets), merged=True
        )

    async def _replace(self, imported: DataStore) -> ImportSummary:
        await self.datastore.replace_datastore(imported)
        return ImportSummary(
            months=len(imported.database), presets=len(imported.presets), merged=False
        )


def has_content(store: DataStore) -> bool:
    """Return True when the datastore holds any months or presets."""
    return bool(store.database) or bool(store.presets)
