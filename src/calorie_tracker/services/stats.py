"""Calorie statistics and threshold lookups."""

import math

from calorie_tracker.domain.models import MealEntry, MonthData, Thresholds
from calorie_tracker.domain.stats import MonthStats

_CHANNEL_MIN = 0
_CHANNEL_MAX = 255


def get_median(values: list[float]) -> float:
    """Return the median of the values, or 0 for an empty list."""
    if not values:
        return 0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def get_quartiles(values: list[float]) -> tuple[float, float, float]:
    """Return the lower quartile, median and upper quartile.

    The sorted values are bisected (the middle value is left out for odd
    lengths) and each half's median is taken.
    """
    ordered = sorted(values)
    half = len(ordered) // 2
    lower = ordered[:half]
    upper = ordered[len(ordered) - half :]
    return get_median(lower), get_median(ordered), get_median(upper)


def total_kcal(entries: list[MealEntry]) -> float:
    """Return the calorie sum of the entries."""
    return sum(entry.kcal for entry in entries)


def daily_totals(month: MonthData) -> list[tuple[int, float]]:
    """Return ``(day_of_month, kcal)`` pairs ordered by day."""
    return sorted((int(day), total_kcal(entries)) for day, entries in month.items())


def summarize_month(month: MonthData) -> MonthStats:
    """Summarize the days of a month that have at least one entry."""
    totals = [kcal for _, kcal in daily_totals(month) if kcal > 0]
    days_tracked = len(totals)
    total = sum(totals)
    lower, median, upper = get_quartiles(totals)
    return MonthStats(
        days_tracked=days_tracked,
        total_kcal=total,
        mean_kcal=math.floor(total / days_tracked) if days_tracked else 0,
        median_kcal=median,
        lower_quartile_kcal=lower,
        upper_quartile_kcal=upper,
    )


def threshold_for_calories(thresholds: Thresholds, kcal: float) -> int | None:
    """Return the highest threshold floor at or below ``kcal``.

    Falls back to the lowest floor when ``kcal`` is below all of them.
    """
    if not thresholds:
        return None
    floors = sorted(thresholds, reverse=True)
    for floor in floors:
        if kcal >= floor:
            return floor
    return floors[-1]


def color_for_calories(
    thresholds: Thresholds, kcal: float, offset: float = 0
) -> tuple[float, float, float] | None:
    """Return the RGB color for a calorie total, or None for an empty day."""
    if not kcal:
        return None
    floor = threshold_for_calories(thresholds, kcal)
    if floor is None:
        return None
    red, green, blue = (
        min(max(channel + offset, _CHANNEL_MIN), _CHANNEL_MAX)
        for channel in thresholds[floor]
    )
    return red, green, blue
