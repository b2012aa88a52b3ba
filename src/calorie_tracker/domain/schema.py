"""Pydantic models describing the JSON datastore format."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

YearMonthKey = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}$")]
DayKey = Annotated[str, StringConstraints(pattern=r"^\d{2}$")]
ThresholdKey = Annotated[str, StringConstraints(pattern=r"^\d+$")]
NonEmptyText = Annotated[str, Field(min_length=1, strict=True)]
PositiveNumber = Annotated[float, Field(gt=0, strict=True)]
ColorChannel = Annotated[float, Field(strict=True)]
RgbColor = Annotated[list[ColorChannel], Field(min_length=3, max_length=3)]


class MealEntryModel(BaseModel):
    """Wire shape of a meal entry."""

    model_config = ConfigDict(populate_by_name=True)

    name: NonEmptyText
    time: NonEmptyText
    servings: PositiveNumber
    kcal_per_serving: PositiveNumber = Field(alias="kcalPerServing")


MonthDataModel = dict[DayKey, list[MealEntryModel]]
DatabaseModel = dict[YearMonthKey, MonthDataModel]


class MealPresetModel(BaseModel):
    """Wire shape of a meal preset."""

    model_config = ConfigDict(populate_by_name=True)

    name: NonEmptyText
    id: NonEmptyText
    kcal_per_serving: PositiveNumber = Field(alias="kcalPerServing")
    usage_count: int | None = Field(default=None, alias="usageCount", ge=0)
    last_usage_time: int | None = Field(default=None, alias="lastUsageTime")


class AppSettingsModel(BaseModel):
    """Wire shape of app settings; absent fields fall back to defaults."""

    model_config = ConfigDict(populate_by_name=True)

    time_format: Literal["12", "24"] | None = Field(default=None, alias="timeFormat")
    item_page_has_intermediate_day_page: bool | None = Field(
        default=None, alias="itemPageHasIntermediateDayPage"
    )
    thresholds: dict[ThresholdKey, RgbColor] | None = None


class DataStoreModel(BaseModel):
    """Wire shape of a full datastore export."""

    database: DatabaseModel
    presets: list[MealPresetModel]
    settings: AppSettingsModel
