"""Catalog domain models."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class CatalogItem:
    """A menu item from the nutrition catalog."""

    id: UUID
    vendor: str
    item_name: str
    calories: float | None = None
    calories_from_fat: float | None = None
    total_fat: float | None = None
    saturated_fat: float | None = None
    trans_fat: float | None = None
    cholesterol: float | None = None
    sodium: float | None = None
    carbs: float | None = None
    fiber: float | None = None
    sugars: float | None = None
    protein: float | None = None
    weight_watchers_points: float | None = None
    ingredients: tuple[str, ...] = ()
    stored_price: float | None = None


@dataclass(frozen=True)
class RankedItem:
    """Catalog item with its ranking score and display price."""

    item: CatalogItem
    match_score: int
    price: float
