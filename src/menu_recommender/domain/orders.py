"""Order history records consumed by analytics."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

COMPLETED = "completed"


@dataclass(frozen=True)
class OrderNutrition:
    """Nutrition snapshot captured when the order was placed."""

    total_calories: float = 0.0
    total_protein: float = 0.0
    total_fat: float = 0.0
    total_carbohydrates: float = 0.0


@dataclass(frozen=True)
class OrderLine:
    """A single purchased item."""

    restaurant: str
    item: str
    quantity: int = 1
    food_item_id: UUID | None = None


@dataclass(frozen=True)
class OrderRecord:
    """Historical purchase."""

    id: UUID
    user_id: UUID
    status: str
    created_at: datetime
    nutrition: OrderNutrition
    lines: tuple[OrderLine, ...] = ()

    @property
    def is_completed(self) -> bool:
        """Return True for orders that count towards analytics."""
        return self.status == COMPLETED
