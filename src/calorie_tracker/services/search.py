"""Search over logged meals by name and calorie floor."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from calorie_tracker.domain.dates import date_string
from calorie_tracker.domain.models import Database, DataStore, MealEntry
from calorie_tracker.domain.search import DaySearchResult, MealSearchOutput
from calorie_tracker.services.matching import NameMatcher
from calorie_tracker.services.stats import total_kcal

_logger = logging.getLogger(__name__)

DateBound = date | str


def filter_entries(
    matcher: NameMatcher, minimum_kcal: float, entries: list[MealEntry]
) -> list[MealEntry]:
    """Return entries whose name matches and whose calories meet the floor."""
    return [
        entry
        for entry in entries
        if matcher.matches(entry.name) and entry.kcal >= minimum_kcal
    ]


def search_for_meals(  # noqa: PLR0913
    database: Database,
    name_filter: str,
    minimum_kcal_filter: float = 0,
    min_date: DateBound | None = None,
    max_date: DateBound | None = None,
    start_from_date_string: str | None = None,
    max_results: int | None = None,
) -> MealSearchOutput:
    """Scan the database from the newest day backwards for matching meals.

    Args:
        database: Year-month keyed meal data to scan.
        name_filter: Name pattern; see ``NameMatcher``.
        minimum_kcal_filter: Minimum calories for a single entry.
        min_date: Oldest date to include, inclusive.
        max_date: Newest date to include, inclusive.
        start_from_date_string: Cursor from a previous page; only older
            dates are scanned.
        max_results: Stop after the day on which this many entries have
            matched. A day's matches are never split across pages.

    Returns:
        The matched days and a cursor for the next page, which is None once
        the oldest data has been scanned.
    """
    if not name_filter or not name_filter.strip():
        return MealSearchOutput()

    matcher = NameMatcher.compile(name_filter)
    lower = _bound(min_date)
    upper = _bound(max_date)
    results: list[DaySearchResult] = []
    found = 0
    for year_month in sorted(database, reverse=True):
        month = database[year_month]
        for day in sorted(month, reverse=True):
            current = f"{year_month}-{day}"
            if start_from_date_string and current >= start_from_date_string:
                continue
            if (lower and current < lower) or (upper and current > upper):
                continue
            entries = month[day]
            matched = filter_entries(matcher, minimum_kcal_filter, entries)
            if matched:
                results.append(
                    DaySearchResult(
                        date_string=current,
                        day_result=matched,
                        matched_item_total_kcal=total_kcal(matched),
                        day_search_total_kcal=total_kcal(entries),
                    )
                )
            found += len(matched)
            if max_results and found >= max_results:
                return MealSearchOutput(
                    search_result=results, search_found_count=found, cursor=current
                )
    return MealSearchOutput(search_result=results, search_found_count=found, cursor=None)


def _bound(value: DateBound | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return date_string(value)
    return value


class DataStoreSource(Protocol):
    """Anything able to load the full datastore."""

    async def get_all_known_data(self) -> DataStore:
        """Return every month, the presets and the settings."""


@dataclass
class MealSearchService:
    """Runs live searches against the persisted datastore."""

    source: DataStoreSource
    page_size: int = 100
    min_name_length: int = 3

    async def search(  # noqa: PLR0913
        self,
        name_filter: str,
        minimum_kcal_filter: float = 0,
        min_date: DateBound | None = None,
        max_date: DateBound | None = None,
        cursor: str | None = None,
    ) -> MealSearchOutput:
        """Return one page of results, or nothing for filters that are too short."""
        if len(name_filter.strip()) < self.min_name_length:
            return MealSearchOutput()
        store = await self.source.get_all_known_data()
        output = search_for_meals(
            store.database,
            name_filter,
            minimum_kcal_filter=minimum_kcal_filter,
            min_date=min_date,
            max_date=max_date,
            start_from_date_string=cursor,
            max_results=self.page_size,
        )
        _logger.debug(
            "Meal search: filter=%s found=%s cursor=%s",
            name_filter,
            output.search_found_count,
            output.cursor,
        )
        return output
