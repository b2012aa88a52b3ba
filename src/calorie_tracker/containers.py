"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from calorie_tracker.adapters.memory_store import InMemoryKeyValueStore
from calorie_tracker.adapters.supabase_store import SupabaseKeyValueStore
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.config import Settings
from calorie_tracker.services.backup import BackupService
from calorie_tracker.services.cache import InMemoryCache
from calorie_tracker.services.datastore import DatastoreService, KeyValueStore
from calorie_tracker.services.presets import PresetService
from calorie_tracker.services.search import MealSearchService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    datastore_service: DatastoreService
    preset_service: PresetService
    search_service: MealSearchService
    backup_service: BackupService


def build_store(settings: Settings) -> KeyValueStore:
    """Create the key/value store selected by the settings."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs SUPABASE_URL and SUPABASE_SERVICE_KEY")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    return InMemoryKeyValueStore()


def build_container(
    settings: Settings | None = None, store: KeyValueStore | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_store = store if store is not None else build_store(resolved_settings)
    datastore_service = DatastoreService(
        store=resolved_store,
        cache=InMemoryCache(),
        prefix=resolved_settings.storage_prefix,
    )
    return AppContainer(
        settings=resolved_settings,
        store=resolved_store,
        datastore_service=datastore_service,
        preset_service=PresetService(datastore_service),
        search_service=MealSearchService(
            datastore_service,
            page_size=resolved_settings.search_page_size,
            min_name_length=resolved_settings.search_min_name_length,
        ),
        backup_service=BackupService(datastore_service),
    )
