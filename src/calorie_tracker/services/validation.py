"""Datastore validation and (de)serialization.

The JSON format is described declaratively by the pydantic models in
``calorie_tracker.domain.schema``; this module turns their errors into a single
``DatastoreValidationError`` naming the first offending path, and converts
between wire models and domain dataclasses.
"""

import json

from pydantic import TypeAdapter, ValidationError

from calorie_tracker.domain.errors import DatastoreValidationError
from calorie_tracker.domain.models import (
    AppSettings,
    DataStore,
    Database,
    MealEntry,
    MealPreset,
    MonthData,
    Thresholds,
    with_default_settings,
)
from calorie_tracker.domain.schema import (
    AppSettingsModel,
    DataStoreModel,
    MealEntryModel,
    MealPresetModel,
    MonthDataModel,
)

REQUIRED_KEYS = ("database", "presets", "settings")

_YEAR_MONTH_KEY_DEPTH = 2

_month_adapter: TypeAdapter[MonthDataModel] = TypeAdapter(MonthDataModel)
_presets_adapter: TypeAdapter[list[MealPresetModel]] = TypeAdapter(
    list[MealPresetModel]
)


def validate_datastore(json_text: str) -> DataStore:
    """Parse a JSON export and return it as a validated datastore.

    Settings fields absent from the export stay None so that a merge can
    tell them apart from explicit values.

    Raises:
        DatastoreValidationError: Describing the first violation found.
    """
    try:
        parsed = json.loads(json_text)
    except (TypeError, ValueError) as exc:
        raise DatastoreValidationError(f"Invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise DatastoreValidationError("Object must be a valid JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in parsed]
    if missing:
        raise DatastoreValidationError(
            f"JSON must have the top-level keys: {', '.join(REQUIRED_KEYS)}. "
            f"Missing: {', '.join(missing)}"
        )

    try:
        model = DataStoreModel.model_validate(parsed)
    except ValidationError as exc:
        raise _first_violation(exc) from exc
    return _to_datastore(model)


def parse_month_data(text: str) -> MonthData:
    """Parse a stored month document."""
    try:
        model = _month_adapter.validate_json(text)
    except ValidationError as exc:
        raise _first_violation(exc) from exc
    return _to_month(model)


def parse_presets(text: str) -> list[MealPreset]:
    """Parse a stored preset list."""
    try:
        models = _presets_adapter.validate_json(text)
    except ValidationError as exc:
        raise _first_violation(exc) from exc
    return [_to_preset(model) for model in models]


def parse_settings(text: str) -> AppSettings:
    """Parse stored settings, backfilling absent fields from the defaults."""
    try:
        model = AppSettingsModel.model_validate_json(text)
    except ValidationError as exc:
        raise _first_violation(exc) from exc
    return with_default_settings(_to_settings(model))


def dump_datastore(store: DataStore) -> str:
    """Serialize a datastore to its JSON export format."""
    return json.dumps(
        {
            "database": datastore_database_payload(store.database),
            "presets": [preset_payload(preset) for preset in store.presets],
            "settings": settings_payload(store.settings),
        }
    )


def datastore_database_payload(database: Database) -> dict[str, object]:
    """Return the JSON-ready payload for a database."""
    return {key: month_payload(month) for key, month in database.items()}


def month_payload(month: MonthData) -> dict[str, list[dict[str, object]]]:
    """Return the JSON-ready payload for a month document."""
    return {
        day: [entry_payload(entry) for entry in entries]
        for day, entries in month.items()
    }


def entry_payload(entry: MealEntry) -> dict[str, object]:
    """Return the JSON-ready payload for a meal entry."""
    return {
        "time": entry.time,
        "name": entry.name,
        "servings": _json_number(entry.servings),
        "kcalPerServing": _json_number(entry.kcal_per_serving),
    }


def preset_payload(preset: MealPreset) -> dict[str, object]:
    """Return the JSON-ready payload for a preset, omitting unset usage."""
    payload: dict[str, object] = {
        "id": preset.id,
        "name": preset.name,
        "kcalPerServing": _json_number(preset.kcal_per_serving),
    }
    if preset.usage_count is not None:
        payload["usageCount"] = preset.usage_count
    if preset.last_usage_time is not None:
        payload["lastUsageTime"] = preset.last_usage_time
    return payload


def settings_payload(settings: AppSettings) -> dict[str, object]:
    """Return the JSON-ready payload for settings, omitting unset fields."""
    payload: dict[str, object] = {}
    if settings.time_format is not None:
        payload["timeFormat"] = settings.time_format
    if settings.item_page_has_intermediate_day_page is not None:
        payload["itemPageHasIntermediateDayPage"] = (
            settings.item_page_has_intermediate_day_page
        )
    if settings.thresholds is not None:
        payload["thresholds"] = {
            str(floor): [_json_number(channel) for channel in color]
            for floor, color in settings.thresholds.items()
        }
    return payload


def _json_number(value: float) -> int | float:
    # Whole numbers are written as integers.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _first_violation(exc: ValidationError) -> DatastoreValidationError:
    error = exc.errors()[0]
    loc = tuple(error["loc"])
    if loc and loc[-1] == "[key]":
        path = loc[:-1]
        return DatastoreValidationError(
            f"{_key_format(path)}, {path[-1]!r} does not match", path
        )
    if error["type"] == "missing":
        return DatastoreValidationError(f"Missing required field {loc[-1]!r}", loc)
    return DatastoreValidationError(error["msg"], loc)


def _key_format(path: tuple[str | int, ...]) -> str:
    if path[0] == "settings":
        return "All threshold keys must be non-negative numbers"
    if path[0] == "database" and len(path) == _YEAR_MONTH_KEY_DEPTH:
        return "Keys of the database must be of the format 'YYYY-MM'"
    return "Keys of a month must be of the format 'DD'"


def _to_datastore(model: DataStoreModel) -> DataStore:
    return DataStore(
        database={key: _to_month(month) for key, month in model.database.items()},
        presets=[_to_preset(preset) for preset in model.presets],
        settings=_to_settings(model.settings),
    )


def _to_month(model: MonthDataModel) -> MonthData:
    return {day: [_to_entry(entry) for entry in entries] for day, entries in model.items()}


def _to_entry(model: MealEntryModel) -> MealEntry:
    return MealEntry(
        time=model.time,
        name=model.name,
        servings=model.servings,
        kcal_per_serving=model.kcal_per_serving,
    )


def _to_preset(model: MealPresetModel) -> MealPreset:
    return MealPreset(
        id=model.id,
        name=model.name,
        kcal_per_serving=model.kcal_per_serving,
        usage_count=model.usage_count,
        last_usage_time=model.last_usage_time,
    )


def _to_settings(model: AppSettingsModel) -> AppSettings:
    thresholds = None
    if model.thresholds is not None:
        thresholds = _to_thresholds(model.thresholds)
    return AppSettings(
        time_format=model.time_format,
        item_page_has_intermediate_day_page=model.item_page_has_intermediate_day_page,
        thresholds=thresholds,
    )


def _to_thresholds(raw: dict[str, list[float]]) -> Thresholds:
    return {int(key): (color[0], color[1], color[2]) for key, color in raw.items()}
