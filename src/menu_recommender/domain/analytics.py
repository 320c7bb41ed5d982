"""Domain models for order analytics."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class TimeRange(StrEnum):
    """Historical window for analytics."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class Granularity(StrEnum):
    """Bucket size for trend series."""

    DAY = "day"
    MONTH = "month"


class RecommendationType(StrEnum):
    """Every recommendation the rule engine can emit."""

    PROTEIN_INCREASE = "protein_increase"
    DIVERSITY = "diversity"
    CALORIE_REDUCTION = "calorie_reduction"
    CALORIE_INCREASE = "calorie_increase"


@dataclass(frozen=True)
class NameCount:
    """Frequency of a restaurant or item."""

    name: str
    count: int


@dataclass(frozen=True)
class NutrientDistribution:
    """Summary statistics for one macro field."""

    min: float
    max: float
    average: float
    total: float


@dataclass(frozen=True)
class NutritionPatterns:
    """Aggregate view of a user's completed orders."""

    time_range: TimeRange
    total_orders: int
    average_calories: float
    average_protein: float
    average_fat: float
    average_carbs: float
    most_ordered_restaurants: list[NameCount]
    most_ordered_items: list[NameCount]
    nutrition_distribution: dict[str, NutrientDistribution]


@dataclass(frozen=True)
class TrendPoint:
    """Aggregated nutrition for one bucket."""

    date: date
    order_count: int
    calories: float
    protein: float
    fat: float
    carbs: float

    @property
    def average_calories(self) -> float:
        """Average calories per order in the bucket."""
        return self.calories / self.order_count if self.order_count else 0.0


@dataclass(frozen=True)
class DietaryTrends:
    """Chronological trend series."""

    period: TimeRange
    granularity: Granularity
    trends: list[TrendPoint]


@dataclass(frozen=True)
class PersonalizedRecommendation:
    """Rule-based dietary suggestion."""

    type: RecommendationType
    message: str
    priority: str
    data: dict[str, object] = field(default_factory=dict)
