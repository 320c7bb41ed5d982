"""Supabase repository for meal combination counters."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from menu_recommender.domain.combos import ComboFrequency
from menu_recommender.services.combos import ComboRepository

TABLE = "meal_combinations"
INCREMENT_FUNCTION = "increment_meal_combination"


@dataclass
class SupabaseComboRepository(ComboRepository):
    """Supabase-backed co-occurrence counters."""

    client: Client

    def list_for_main_item(
        self, main_item_id: UUID, limit: int
    ) -> list[ComboFrequency]:
        """Return counters for a main item, most popular first."""
        response = (
            self.client.table(TABLE)
            .select("main_item_id, complementary_item_id, frequency, popularity")
            .eq("main_item_id", str(main_item_id))
            .order("popularity", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def increment(
        self, main_item_id: UUID, complementary_item_id: UUID, amount: int
    ) -> ComboFrequency:
        """Increment-or-insert through a Postgres function in one statement."""
        response = self.client.rpc(
            INCREMENT_FUNCTION,
            {
                "p_main_item_id": str(main_item_id),
                "p_complementary_item_id": str(complementary_item_id),
                "p_amount": amount,
            },
        ).execute()
        data = response.data
        row = data[0] if isinstance(data, list) and data else data
        if not isinstance(row, dict):
            raise RuntimeError("Failed to increment meal combination")
        return _parse_row(row)

    def set_popularity(
        self, main_item_id: UUID, complementary_item_id: UUID, popularity: int
    ) -> None:
        """Overwrite the popularity of a pair."""
        (
            self.client.table(TABLE)
            .update({"popularity": popularity})
            .eq("main_item_id", str(main_item_id))
            .eq("complementary_item_id", str(complementary_item_id))
            .execute()
        )


def _parse_row(row: dict[str, object]) -> ComboFrequency:
    return ComboFrequency(
        main_item_id=UUID(str(row["main_item_id"])),
        complementary_item_id=UUID(str(row["complementary_item_id"])),
        frequency=int(row.get("frequency") or 0),
        popularity=int(row.get("popularity") or 0),
    )
