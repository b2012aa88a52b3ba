"""Domain models for the calorie datastore."""

from dataclasses import dataclass, field, fields, replace

DEFAULT_TIME_FORMAT = "12"


@dataclass(frozen=True)
class MealEntry:
    """A single logged food item, identified within its day by name and time."""

    time: str
    name: str
    servings: float
    kcal_per_serving: float

    @property
    def kcal(self) -> float:
        """Total calories for the entry."""
        return self.servings * self.kcal_per_serving


DayRecord = list[MealEntry]
MonthData = dict[str, DayRecord]
Database = dict[str, MonthData]
Thresholds = dict[int, tuple[float, float, float]]


@dataclass(frozen=True)
class MealPreset:
    """A saved meal template that can be reused when logging."""

    id: str
    name: str
    kcal_per_serving: float
    usage_count: int | None = None
    last_usage_time: int | None = None


def default_thresholds() -> Thresholds:
    """Return the default calorie color thresholds."""
    return {
        3000: (224, 96, 96),
        2400: (255, 127, 80),
        2000: (255, 255, 0),
        1750: (144, 238, 144),
        1500: (173, 216, 230),
        1000: (255, 182, 193),
        0: (197, 182, 269),
    }


@dataclass(frozen=True)
class AppSettings:
    """User preferences stored alongside the meal data.

    A field set to None was absent from the source document; see
    ``with_default_settings``.
    """

    time_format: str | None = DEFAULT_TIME_FORMAT
    item_page_has_intermediate_day_page: bool | None = True
    thresholds: Thresholds | None = field(default_factory=default_thresholds)


def with_default_settings(settings: AppSettings) -> AppSettings:
    """Return settings with every unset field taken from the defaults."""
    defaults = AppSettings()
    missing = {
        setting.name: getattr(defaults, setting.name)
        for setting in fields(settings)
        if getattr(settings, setting.name) is None
    }
    return replace(settings, **missing)


@dataclass(frozen=True)
class DataStore:
    """Root aggregate used for import, export and merge."""

    database: Database = field(default_factory=dict)
    presets: list[MealPreset] = field(default_factory=list)
    settings: AppSettings = field(default_factory=AppSettings)
