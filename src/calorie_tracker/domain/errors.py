"""Errors raised by the calorie tracker core."""


class CalorieTrackerError(Exception):
    """Base class for calorie tracker errors."""


class DatastoreValidationError(CalorieTrackerError):
    """Raised when a datastore document does not match the schema.

    Attributes:
        path: Location of the first violation, e.g. ``("database", "2020-01")``.
        reason: Human readable description of the violation.
    """

    def __init__(self, reason: str, path: tuple[str | int, ...] = ()) -> None:
        self.reason = reason
        self.path = path
        location = format_path(path)
        message = f"Failed to validate data. {reason}"
        if location:
            message = f"Failed to validate data. {location}: {reason}"
        super().__init__(message)


class StorageWriteError(CalorieTrackerError):
    """Raised when the key/value store rejects a write."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Could not write value for {key}")


def format_path(path: tuple[str | int, ...]) -> str:
    """Render a location tuple as ``database.2020-01.01[0].name``."""
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = str(part)
    return rendered
