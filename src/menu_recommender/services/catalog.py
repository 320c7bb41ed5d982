"""Catalog persistence interface."""

from typing import Protocol
from uuid import UUID

from menu_recommender.domain.catalog import CatalogItem
from menu_recommender.domain.predicates import Predicate


class CatalogRepository(Protocol):
    """Read access to the nutrition catalog."""

    def find_items(self, predicate: Predicate) -> list[CatalogItem]:
        """Return every item matching the predicate, in a stable order."""

    def get_item(self, item_id: UUID) -> CatalogItem | None:
        """Return an item by id, if present."""

    def get_items(self, item_ids: list[UUID]) -> list[CatalogItem]:
        """Return the items that exist among the given ids."""

    def list_by_vendor(
        self, vendor: str, exclude_id: UUID, limit: int
    ) -> list[CatalogItem]:
        """Return up to limit items from a vendor, excluding one item."""
