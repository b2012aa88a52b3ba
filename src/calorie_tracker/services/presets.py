"""Services for managing meal presets."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from calorie_tracker.domain.models import MealEntry, MealPreset
from calorie_tracker.services.sorting import PresetSortMode, filter_presets, sort_presets

SUGGESTION_MINIMUM_USES = 2
SUGGESTION_LIMIT = 6


class PresetRepository(Protocol):
    """Persistence interface for the preset list."""

    async def get_presets(self) -> list[MealPreset]:
        """Return the saved presets."""

    async def set_presets(self, presets: list[MealPreset]) -> None:
        """Replace the saved presets."""


@dataclass(frozen=True)
class PresetSuggestion:
    """A frequently logged meal that is not saved as a preset yet."""

    name: str
    kcal_per_serving: float
    times: int


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class PresetService:
    """Application service for preset operations."""

    repository: PresetRepository
    clock: Callable[[], datetime] = _now

    async def list_presets(
        self, name_filter: str = "", mode: PresetSortMode = PresetSortMode.NAME
    ) -> list[MealPreset]:
        """Return presets matching the filter in the requested order."""
        presets = await self.repository.get_presets()
        return sort_presets(filter_presets(presets, name_filter), mode)

    async def save_preset(
        self,
        name: str,
        kcal_per_serving: float,
        preset_id: str | None = None,
        usage_count: int | None = None,
    ) -> MealPreset:
        """Update the preset with ``preset_id`` or create a new one.

        Updating keeps the preset's usage statistics.

        Raises:
            ValueError: If the name is blank or the calories are not positive.
        """
        if not name.strip() or kcal_per_serving <= 0:
            raise ValueError("Provide Name and Kcals per serving.")
        presets = await self.repository.get_presets()
        index = _index_of(presets, preset_id)
        if index is not None:
            saved = replace(presets[index], name=name, kcal_per_serving=kcal_per_serving)
            presets = [*presets[:index], saved, *presets[index + 1 :]]
        else:
            saved = MealPreset(
                id=self._new_id(presets),
                name=name,
                kcal_per_serving=kcal_per_serving,
                usage_count=usage_count,
            )
            presets = [*presets, saved]
        await self.repository.set_presets(presets)
        return saved

    async def delete_preset(self, preset_id: str) -> bool:
        """Delete a preset, returning False when it does not exist."""
        presets = await self.repository.get_presets()
        index = _index_of(presets, preset_id)
        if index is None:
            return False
        await self.repository.set_presets([*presets[:index], *presets[index + 1 :]])
        return True

    async def record_usage(self, preset_id: str) -> MealPreset | None:
        """Count a use of the preset and stamp the time it was used."""
        used_at = int(self.clock().timestamp() * 1000)
        return await self._update(
            preset_id,
            lambda preset: replace(
                preset,
                usage_count=(preset.usage_count or 0) + 1,
                last_usage_time=used_at,
            ),
        )

    async def reset_usage(self, preset_id: str) -> MealPreset | None:
        """Clear a preset's usage statistics."""
        return await self._update(
            preset_id,
            lambda preset: replace(preset, usage_count=0, last_usage_time=None),
        )

    async def _update(
        self, preset_id: str, change: Callable[[MealPreset], MealPreset]
    ) -> MealPreset | None:
        presets = await self.repository.get_presets()
        index = _index_of(presets, preset_id)
        if index is None:
            return None
        updated = change(presets[index])
        await self.repository.set_presets(
            [*presets[:index], updated, *presets[index + 1 :]]
        )
        return updated

    def _new_id(self, presets: list[MealPreset]) -> str:
        taken = {preset.id for preset in presets}
        candidate = int(self.clock().timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)


def suggest_presets(
    entries: list[MealEntry],
    presets: list[MealPreset],
    minimum_uses: int = SUGGESTION_MINIMUM_USES,
    limit: int = SUGGESTION_LIMIT,
) -> list[PresetSuggestion]:
    """Suggest presets for meals logged repeatedly under an unsaved name.

    Names are compared trimmed and lower-cased; the same name logged with a
    different calorie value counts separately.
    """
    saved_names = {_normalize(preset.name) for preset in presets}
    counts: dict[tuple[str, float], int] = {}
    for entry in entries:
        name = _normalize(entry.name)
        if name in saved_names:
            continue
        key = (name, entry.kcal_per_serving)
        counts[key] = counts.get(key, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        PresetSuggestion(name=name, kcal_per_serving=kcal, times=times)
        for (name, kcal), times in ranked
        if times >= minimum_uses
    ][:limit]


def _normalize(name: str) -> str:
    return name.strip().lower()


def _index_of(presets: list[MealPreset], preset_id: str | None) -> int | None:
    if preset_id is None:
        return None
    for index, preset in enumerate(presets):
        if preset.id == preset_id:
            return index
    return None
