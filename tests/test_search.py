"""Tests for meal search."""

import asyncio
from datetime import date, timedelta

import pytest

from calorie_tracker.domain.dates import date_string, day_key, year_month_key
from calorie_tracker.domain.models import Database, DataStore
from calorie_tracker.services.matching import NameMatcher
from calorie_tracker.services.search import MealSearchService, search_for_meals
from tests.conftest import make_entry


def _one_entry_per_day(days: int, start: date = date(2022, 1, 1)) -> Database:
    database: Database = {}
    for offset in range(days):
        day = start + timedelta(days=offset)
        database.setdefault(year_month_key(day), {})[day_key(day)] = [
            make_entry("x marks", "12:00")
        ]
    return database


def test_search_paginates_on_day_boundaries() -> None:
    database = _one_entry_per_day(150)

    first = search_for_meals(database, "x", max_results=100)
    second = search_for_meals(
        database, "x", start_from_date_string=first.cursor, max_results=100
    )

    assert first.search_found_count == 100
    assert len(first.search_result) == 100
    assert first.cursor is not None
    assert second.search_found_count == 50
    assert second.cursor is None
    first_dates = {result.date_string for result in first.search_result}
    second_dates = {result.date_string for result in second.search_result}
    assert not first_dates & second_dates
    assert len(first_dates | second_dates) == 150


def test_search_returns_newest_dates_first() -> None:
    database = _one_entry_per_day(40)

    output = search_for_meals(database, "x")

    dates = [result.date_string for result in output.search_result]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == date_string(date(2022, 2, 9))


def test_search_never_splits_a_day_across_pages() -> None:
    database: Database = {
        "2022-01": {
            "02": [make_entry("x1", "08:00"), make_entry("x2", "09:00")],
            "01": [make_entry("x3", "08:00")],
        }
    }

    output = search_for_meals(database, "x", max_results=1)

    assert output.cursor == "2022-01-02"
    assert output.search_found_count == 2
    assert len(output.search_result[0].day_result) == 2


@pytest.mark.parametrize("name_filter", ["chicken", "CHICKEN", "chick*", "soup$"])
def test_search_matches_names_case_insensitively(name_filter: str) -> None:
    database: Database = {"2022-01": {"01": [make_entry("Chicken Soup")]}}

    output = search_for_meals(database, name_filter)

    assert output.search_found_count == 1


def test_search_does_not_match_other_names() -> None:
    database: Database = {"2022-01": {"01": [make_entry("Chicken Soup")]}}

    assert search_for_meals(database, "beef").search_result == []


def test_search_falls_back_to_substring_for_invalid_patterns() -> None:
    database: Database = {
        "2022-01": {"01": [make_entry("Soup (large)"), make_entry("Soup")]}
    }

    output = search_for_meals(database, "(large")

    assert [entry.name for entry in output.search_result[0].day_result] == [
        "Soup (large)"
    ]


@pytest.mark.parametrize("name_filter", ["", "   "])
def test_search_with_blank_filter_returns_nothing(name_filter: str) -> None:
    output = search_for_meals(_one_entry_per_day(3), name_filter)

    assert output.search_result == []
    assert output.search_found_count == 0
    assert output.cursor is None


def test_search_applies_calorie_floor_and_totals() -> None:
    database: Database = {
        "2022-01": {
            "05": [
                make_entry("rice", "12:00", 2, 150),
                make_entry("rice cake", "15:00", 1, 35),
                make_entry("beer", "20:00", 1, 200),
            ]
        }
    }

    output = search_for_meals(database, "rice", minimum_kcal_filter=100)

    result = output.search_result[0]
    assert [entry.name for entry in result.day_result] == ["rice"]
    assert result.matched_item_total_kcal == 300
    assert result.day_search_total_kcal == 535


def test_search_respects_date_bounds() -> None:
    database = _one_entry_per_day(10)

    output = search_for_meals(
        database, "x", min_date=date(2022, 1, 3), max_date="2022-01-05"
    )

    assert [result.date_string for result in output.search_result] == [
        "2022-01-05",
        "2022-01-04",
        "2022-01-03",
    ]


def test_name_matcher_reports_fallback() -> None:
    assert NameMatcher.compile("chick*").is_regex
    assert not NameMatcher.compile("[oops").is_regex
    assert NameMatcher.compile("[oops").matches("my [OOPS] meal")


class _StaticSource:
    def __init__(self, store: DataStore) -> None:
        self.store = store
        self.loads = 0

    async def get_all_known_data(self) -> DataStore:
        self.loads += 1
        return self.store


def test_search_service_ignores_short_filters() -> None:
    source = _StaticSource(DataStore(database=_one_entry_per_day(5)))
    service = MealSearchService(source, page_size=2, min_name_length=3)

    short = asyncio.run(service.search("x"))
    page = asyncio.run(service.search("x m"))

    assert short.search_result == []
    assert source.loads == 1
    assert page.search_found_count == 2
    assert page.cursor == "2022-01-04"
