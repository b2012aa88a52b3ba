"""Date and time key helpers."""

import re
from datetime import date

_DATE_STRING_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def year_month_key(day: date) -> str:
    """Return the ``YYYY-MM`` database key for a date."""
    return f"{day.year:04d}-{day.month:02d}"


def day_key(day: date) -> str:
    """Return the two-digit day-of-month key for a date."""
    return f"{day.day:02d}"


def date_string(day: date) -> str:
    """Return the ``YYYY-MM-DD`` string used to address a day record."""
    return f"{year_month_key(day)}-{day_key(day)}"


def split_date_string(value: str) -> tuple[str, str]:
    """Split ``YYYY-MM-DD`` into its year-month and day keys.

    Raises:
        ValueError: If the value is not a zero-padded ``YYYY-MM-DD`` string.
    """
    if not _DATE_STRING_PATTERN.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date string, got {value!r}")
    return value[0:7], value[8:10]


def parse_time(value: str) -> tuple[int, int]:
    """Parse an ``HH:MM`` time into hour and minute.

    Raises:
        ValueError: If the value is not two colon-separated integers.
    """
    hour, _, minute = value.partition(":")
    return int(hour), int(minute)
