"""Supabase repository for the fast-food catalog."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from menu_recommender.adapters.postgrest import compile_predicate
from menu_recommender.domain.catalog import CatalogItem
from menu_recommender.domain.predicates import Predicate
from menu_recommender.services.catalog import CatalogRepository
from menu_recommender.services.nutrition import to_number

TABLE = "fast_food_items"
PAGE_SIZE = 1000

_NUTRIENT_COLUMNS = (
    "calories",
    "calories_from_fat",
    "total_fat",
    "saturated_fat",
    "trans_fat",
    "cholesterol",
    "sodium",
    "carbs",
    "fiber",
    "sugars",
    "protein",
    "weight_watchers_points",
)

_COLUMNS = ", ".join(
    ("id", "company", "item", *_NUTRIENT_COLUMNS, "ingredients", "price")
)


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase-backed catalog reads."""

    client: Client
    page_size: int = PAGE_SIZE

    def find_items(self, predicate: Predicate) -> list[CatalogItem]:
        """Return all matching items ordered by id, reading page by page."""
        logic_tree = compile_predicate(predicate)
        items: list[CatalogItem] = []
        start = 0
        while True:
            query = self.client.table(TABLE).select(_COLUMNS)
            if logic_tree is not None:
                query = query.or_(logic_tree)
            response = (
                query.order("id", desc=False)
                .range(start, start + self.page_size - 1)
                .execute()
            )
            rows = response.data or []
            items.extend(_parse_item(row) for row in rows)
            if len(rows) < self.page_size:
                return items
            start += self.page_size

    def get_item(self, item_id: UUID) -> CatalogItem | None:
        """Return an item by id."""
        response = (
            self.client.table(TABLE)
            .select(_COLUMNS)
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def get_items(self, item_ids: list[UUID]) -> list[CatalogItem]:
        """Return the existing items among the ids."""
        if not item_ids:
            return []
        response = (
            self.client.table(TABLE)
            .select(_COLUMNS)
            .in_("id", [str(item_id) for item_id in item_ids])
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def list_by_vendor(
        self, vendor: str, exclude_id: UUID, limit: int
    ) -> list[CatalogItem]:
        """Return other items from the same vendor."""
        response = (
            self.client.table(TABLE)
            .select(_COLUMNS)
            .eq("company", vendor)
            .neq("id", str(exclude_id))
            .order("id", desc=False)
            .limit(limit)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]


def _parse_item(row: dict[str, object]) -> CatalogItem:
    ingredients = row.get("ingredients")
    return CatalogItem(
        id=UUID(str(row["id"])),
        vendor=str(row.get("company") or ""),
        item_name=str(row.get("item") or ""),
        **{column: to_number(row.get(column)) for column in _NUTRIENT_COLUMNS},
        ingredients=(
            tuple(str(i) for i in ingredients if i)
            if isinstance(ingredients, list)
            else ()
        ),
        stored_price=to_number(row.get("price")),
    )
