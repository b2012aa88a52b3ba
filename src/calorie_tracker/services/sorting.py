"""Ordering helpers for meal entries and presets.

All helpers return new lists and leave their input untouched.
"""

from enum import Enum

from calorie_tracker.domain.dates import parse_time
from calorie_tracker.domain.models import MealEntry, MealPreset
from calorie_tracker.services.matching import NameMatcher


class PresetSortMode(Enum):
    """Orderings offered for the preset list."""

    NAME = "Name"
    LAST_USAGE = "Last Usage"
    USAGE_COUNT = "Usage Count"


def sort_meals_by_time(entries: list[MealEntry]) -> list[MealEntry]:
    """Return entries ordered by time of day.

    The sort is stable, so entries logged at the same minute keep their
    relative order. Entries with unreadable times go last.
    """
    return sorted(entries, key=_time_key)


def sort_presets_by_name(presets: list[MealPreset]) -> list[MealPreset]:
    """Return presets ordered by name, ignoring case."""
    return sorted(presets, key=lambda preset: (preset.name.casefold(), preset.name))


def sort_presets(
    presets: list[MealPreset], mode: PresetSortMode = PresetSortMode.NAME
) -> list[MealPreset]:
    """Return presets in the requested order, ties broken by name."""
    by_name = sort_presets_by_name(presets)
    if mode is PresetSortMode.LAST_USAGE:
        return sorted(
            by_name, key=lambda preset: preset.last_usage_time or 0, reverse=True
        )
    if mode is PresetSortMode.USAGE_COUNT:
        return sorted(by_name, key=lambda preset: preset.usage_count or 0, reverse=True)
    return by_name


def filter_presets(presets: list[MealPreset], name_filter: str = "") -> list[MealPreset]:
    """Return presets whose name matches the filter."""
    matcher = NameMatcher.compile(name_filter)
    return [preset for preset in presets if matcher.matches(preset.name)]


def _time_key(entry: MealEntry) -> tuple[int, int, int]:
    try:
        hour, minute = parse_time(entry.time)
    except ValueError:
        return (1, 0, 0)
    return (0, hour, minute)
