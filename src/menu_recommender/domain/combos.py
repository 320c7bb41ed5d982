"""Domain models for combo suggestions."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from menu_recommender.domain.catalog import CatalogItem


class ComboReason(StrEnum):
    """Why an item was suggested alongside the main item."""

    POPULAR_TOGETHER = "popular_together"
    SAME_VENDOR_FALLBACK = "same_vendor_fallback"


@dataclass(frozen=True)
class ComboFrequency:
    """Persisted co-occurrence counter between two catalog items."""

    main_item_id: UUID
    complementary_item_id: UUID
    frequency: int
    popularity: int


@dataclass(frozen=True)
class ComboPreferences:
    """Optional dietary flags that tune compatibility scoring."""

    low_sugar: bool = False
    low_sodium: bool = False


@dataclass(frozen=True)
class ComboSuggestion:
    """Complementary item with its scores."""

    item: CatalogItem
    reason: ComboReason
    popularity_score: float
    nutritional_score: float
    frequency: int | None = None
    popularity: int | None = None
