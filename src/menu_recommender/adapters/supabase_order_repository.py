"""Supabase repository for order history."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from menu_recommender.domain.orders import OrderLine, OrderNutrition, OrderRecord
from menu_recommender.services.analytics import OrderRepository
from menu_recommender.services.nutrition import to_number


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for order analytics queries."""

    client: Client

    def list_orders(
        self, user_id: UUID, since: datetime | None, status: str | None
    ) -> list[OrderRecord]:
        """Return a user's orders in chronological order."""
        query = (
            self.client.table("orders")
            .select("id, user_id, status, created_at, nutrition, items")
            .eq("user_id", str(user_id))
        )
        if status is not None:
            query = query.eq("status", status)
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        response = query.order("created_at", desc=False).execute()
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> OrderRecord:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    nutrition = row.get("nutrition")
    nutrition = nutrition if isinstance(nutrition, dict) else {}
    items = row.get("items")
    lines = (
        tuple(_parse_line(item) for item in items if isinstance(item, dict))
        if isinstance(items, list)
        else ()
    )
    return OrderRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        status=str(row.get("status") or ""),
        created_at=created_at,
        nutrition=OrderNutrition(
            total_calories=to_number(nutrition.get("total_calories")) or 0.0,
            total_protein=to_number(nutrition.get("total_protein")) or 0.0,
            total_fat=to_number(nutrition.get("total_fat")) or 0.0,
            total_carbohydrates=(
                to_number(nutrition.get("total_carbohydrates")) or 0.0
            ),
        ),
        lines=lines,
    )


def _parse_line(item: dict[str, object]) -> OrderLine:
    food_item_id = item.get("food_item_id")
    quantity = to_number(item.get("quantity"))
    return OrderLine(
        restaurant=str(item.get("restaurant") or ""),
        item=str(item.get("item") or item.get("name") or ""),
        quantity=int(quantity) if quantity is not None and quantity >= 1 else 1,
        food_item_id=UUID(str(food_item_id)) if food_item_id else None,
    )
