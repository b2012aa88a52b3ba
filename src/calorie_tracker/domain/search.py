"""Domain models for meal search results."""

from dataclasses import dataclass, field

from calorie_tracker.domain.models import MealEntry


@dataclass(frozen=True)
class DaySearchResult:
    """Matched entries for a single day."""

    date_string: str
    day_result: list[MealEntry]
    matched_item_total_kcal: float
    day_search_total_kcal: float


@dataclass(frozen=True)
class MealSearchOutput:
    """A page of search results.

    ``cursor`` is the last date scanned when the page filled up, or None when
    the scan reached the oldest data.
    """

    search_result: list[DaySearchResult] = field(default_factory=list)
    search_found_count: int = 0
    cursor: str | None = None
