"""Complementary item suggestions."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from menu_recommender.domain.combos import (
    ComboFrequency,
    ComboPreferences,
    ComboReason,
    ComboSuggestion,
)
from menu_recommender.domain.errors import ValidationError
from menu_recommender.services.catalog import CatalogRepository
from menu_recommender.services.nutrition import clamp01, compatibility, to_number

DEFAULT_LIMIT = 5
POPULARITY_SCALE = 1000

_FOCUS_FLAGS = {"low_sugar": "low_sugar", "low_sodium": "low_sodium"}

_logger = logging.getLogger(__name__)


class ComboRepository(Protocol):
    """Persistence interface for co-occurrence counters."""

    def list_for_main_item(
        self, main_item_id: UUID, limit: int
    ) -> list[ComboFrequency]:
        """Return counters for a main item, most popular first."""

    def increment(
        self, main_item_id: UUID, complementary_item_id: UUID, amount: int
    ) -> ComboFrequency:
        """Atomically add to a pair's frequency, creating it if needed."""

    def set_popularity(
        self, main_item_id: UUID, complementary_item_id: UUID, popularity: int
    ) -> None:
        """Overwrite a pair's popularity."""


@dataclass
class ComboService:
    """Suggests items that go well with a main item."""

    combos: ComboRepository
    catalog: CatalogRepository

    def suggest(
        self,
        main_item_id: object,
        limit: object = DEFAULT_LIMIT,
        preferences: ComboPreferences | None = None,
    ) -> list[ComboSuggestion]:
        """Return popular pairings, or same-vendor items when none are known."""
        item_id = parse_item_id(main_item_id)
        size = _parse_limit(limit)

        rows = self.combos.list_for_main_item(item_id, size)[:size]
        main = self.catalog.get_item(item_id)
        if rows:
            popular = self._popular(main, rows, preferences)
            if popular or main is None:
                return popular
        if main is None:
            return []

        fallback = self.catalog.list_by_vendor(main.vendor, main.id, size)
        return [
            ComboSuggestion(
                item=item,
                reason=ComboReason.SAME_VENDOR_FALLBACK,
                popularity_score=0.0,
                nutritional_score=compatibility(main, item, preferences),
            )
            for item in fallback[:size]
            if item.id != main.id
        ]

    def record_combination(
        self, main_item_id: UUID, complementary_item_id: UUID, amount: int = 1
    ) -> ComboFrequency:
        """Count a pairing and refresh its popularity."""
        combo = self.combos.increment(main_item_id, complementary_item_id, amount)
        try:
            self.combos.set_popularity(
                main_item_id, complementary_item_id, combo.frequency
            )
        except Exception:
            _logger.exception(
                "Failed to refresh combo popularity",
                extra={"main_item_id": str(main_item_id)},
            )
            return combo
        return ComboFrequency(
            main_item_id=combo.main_item_id,
            complementary_item_id=combo.complementary_item_id,
            frequency=combo.frequency,
            popularity=combo.frequency,
        )

    def _popular(
        self,
        main: object,
        rows: list[ComboFrequency],
        preferences: ComboPreferences | None,
    ) -> list[ComboSuggestion]:
        items = {
            item.id: item
            for item in self.catalog.get_items([r.complementary_item_id for r in rows])
        }
        suggestions = []
        for row in rows:
            item = items.get(row.complementary_item_id)
            if item is None:
                _logger.warning(
                    "Combo references missing item %s", row.complementary_item_id
                )
                continue
            suggestions.append(
                ComboSuggestion(
                    item=item,
                    reason=ComboReason.POPULAR_TOGETHER,
                    frequency=row.frequency,
                    popularity=row.popularity,
                    popularity_score=popularity_score(row.popularity),
                    nutritional_score=compatibility(main, item, preferences),
                )
            )
        return suggestions


def popularity_score(popularity: object) -> float:
    """Normalize a popularity counter into [0, 1]."""
    value = to_number(popularity) or 0.0
    return clamp01(min(1.0, value / POPULARITY_SCALE))


def parse_item_id(value: object) -> UUID:
    """Return the main item id or raise ValidationError."""
    if isinstance(value, UUID):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("mainItemId is required")
    try:
        return UUID(str(value).strip())
    except ValueError as exc:
        raise ValidationError("mainItemId must be a valid item id") from exc


def parse_preferences(
    raw: object, nutritional_focus: str | None = None
) -> ComboPreferences | None:
    """Read preference flags; malformed payloads mean no preferences."""
    payload = raw
    if isinstance(raw, str):
        try:
            payload = json.loads(raw) if raw.strip() else None
        except ValueError:
            payload = None
    if isinstance(payload, Mapping):
        return ComboPreferences(
            low_sugar=_flag(payload, "lowSugar", "low_sugar"),
            low_sodium=_flag(payload, "lowSodium", "low_sodium"),
        )
    flag = _FOCUS_FLAGS.get(nutritional_focus or "")
    if flag is not None:
        return ComboPreferences(**{flag: True})
    return None


def _flag(payload: Mapping[str, object], *keys: str) -> bool:
    return any(payload.get(key) is True for key in keys)


def _parse_limit(limit: object) -> int:
    number = to_number(limit)
    if number is None or number < 1:
        return DEFAULT_LIMIT
    return int(number)
