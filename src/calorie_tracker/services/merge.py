"""Merging of two datastores during import."""

from dataclasses import fields

from calorie_tracker.domain.models import (
    AppSettings,
    DataStore,
    Database,
    DayRecord,
    MealPreset,
    MonthData,
)
from calorie_tracker.services.sorting import sort_meals_by_time


def merge_datastores(preferred: DataStore, merging: DataStore) -> DataStore:
    """Combine two datastores, letting ``preferred`` win every conflict.

    Entries collide on ``(name, time)`` within a day and presets collide on
    ``id``; the first occurrence, taken from ``preferred``, is kept. Neither
    input is modified.
    """
    return DataStore(
        database=merge_databases(preferred.database, merging.database),
        presets=merge_presets(preferred.presets, merging.presets),
        settings=merge_settings(preferred.settings, merging.settings),
    )


def merge_databases(preferred: Database, merging: Database) -> Database:
    """Merge two databases month by month."""
    merged: Database = {}
    for key, month in preferred.items():
        if key in merging:
            merged[key] = merge_months(month, merging[key])
        else:
            merged[key] = _copy_month(month)
    for key, month in merging.items():
        if key not in merged:
            merged[key] = _copy_month(month)
    return merged


def merge_months(preferred: MonthData, merging: MonthData) -> MonthData:
    """Merge two month documents day by day."""
    merged: MonthData = {}
    for day, entries in preferred.items():
        if day in merging:
            merged[day] = merge_days(entries, merging[day])
        else:
            merged[day] = list(entries)
    for day, entries in merging.items():
        if day not in merged:
            merged[day] = list(entries)
    return merged


def merge_days(preferred: DayRecord, merging: DayRecord) -> DayRecord:
    """Combine two day records, dropping later duplicates of ``(name, time)``."""
    seen: set[tuple[str, str]] = set()
    combined: DayRecord = []
    for entry in [*preferred, *merging]:
        identity = (entry.name, entry.time)
        if identity in seen:
            continue
        seen.add(identity)
        combined.append(entry)
    return sort_meals_by_time(combined)


def merge_presets(
    preferred: list[MealPreset], merging: list[MealPreset]
) -> list[MealPreset]:
    """Concatenate preset lists, keeping the first preset for each id."""
    seen: set[str] = set()
    merged: list[MealPreset] = []
    for preset in [*preferred, *merging]:
        if preset.id in seen:
            continue
        seen.add(preset.id)
        merged.append(preset)
    return merged


def merge_settings(preferred: AppSettings, merging: AppSettings) -> AppSettings:
    """Overlay defaults, then ``merging``, then ``preferred``, field by field."""
    values = _settings_fields(AppSettings())
    for source in (merging, preferred):
        values.update(
            {
                name: value
                for name, value in _settings_fields(source).items()
                if value is not None
            }
        )
    return AppSettings(**values)


def _settings_fields(settings: AppSettings) -> dict[str, object]:
    values: dict[str, object] = {}
    for field in fields(settings):
        value = getattr(settings, field.name)
        values[field.name] = dict(value) if isinstance(value, dict) else value
    return values


def _copy_month(month: MonthData) -> MonthData:
    return {day: list(entries) for day, entries in month.items()}
