"""Domain models for statistics."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MonthStats:
    """Calorie statistics for a month of data."""

    days_tracked: int
    total_kcal: float
    mean_kcal: int
    median_kcal: float
    lower_quartile_kcal: float
    upper_quartile_kcal: float
