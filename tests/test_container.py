"""Tests for container wiring."""

import asyncio
import logging

import pytest

from calorie_tracker.adapters.memory_store import InMemoryKeyValueStore
from calorie_tracker.config import Settings
from calorie_tracker.containers import build_container, build_store
from tests.conftest import make_entry


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.store, InMemoryKeyValueStore)
    assert container.datastore_service.prefix == "@test"
    assert container.search_service.page_size == settings.search_page_size
    assert container.preset_service.repository is container.datastore_service
    assert container.backup_service.datastore is container.datastore_service


def test_container_services_share_storage(settings: Settings) -> None:
    container = build_container(settings)
    asyncio.run(
        container.datastore_service.modify_entry(
            "2024-05-03", "pasta", "19:00", make_entry("pasta", "19:00", 1, 600)
        )
    )

    output = asyncio.run(container.search_service.search("pasta"))

    assert output.search_found_count == 1
    assert output.search_result[0].date_string == "2024-05-03"


def test_supabase_backend_requires_credentials() -> None:
    settings = Settings(
        storage_backend="supabase", supabase_url=None, supabase_service_key=None
    )

    with pytest.raises(ValueError, match="Supabase storage"):
        build_store(settings)


def test_build_container_applies_log_level() -> None:
    build_container(Settings(storage_backend="memory", log_level="WARNING"))

    assert logging.getLogger("calorie_tracker").level == logging.WARNING
