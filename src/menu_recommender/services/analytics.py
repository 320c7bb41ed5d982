"""Order history analytics: patterns, trends and recommendations."""

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from menu_recommender.domain.analytics import (
    DietaryTrends,
    Granularity,
    NameCount,
    NutrientDistribution,
    NutritionPatterns,
    PersonalizedRecommendation,
    RecommendationType,
    TimeRange,
    TrendPoint,
)
from menu_recommender.domain.errors import InvalidUserId, ValidationError
from menu_recommender.domain.orders import COMPLETED, OrderRecord

TOP_N = 5
PROTEIN_TARGET_G = 30.0
DIVERSITY_MIN_DISTINCT = 3

_WINDOW_DAYS = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
    TimeRange.YEAR: 365,
    TimeRange.ALL: None,
}

_DEFAULT_GRANULARITY = {
    TimeRange.WEEK: Granularity.DAY,
    TimeRange.MONTH: Granularity.DAY,
    TimeRange.YEAR: Granularity.MONTH,
    TimeRange.ALL: Granularity.MONTH,
}

_MACROS: dict[str, Callable[[OrderRecord], float]] = {
    "calories": lambda order: order.nutrition.total_calories,
    "protein": lambda order: order.nutrition.total_protein,
    "fat": lambda order: order.nutrition.total_fat,
    "carbs": lambda order: order.nutrition.total_carbohydrates,
}

_logger = logging.getLogger(__name__)


class OrderRepository(Protocol):
    """Read access to a user's order history."""

    def list_orders(
        self, user_id: UUID, since: datetime | None, status: str | None
    ) -> list[OrderRecord]:
        """Return orders created at or after since, optionally by status."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class OrderAnalyticsService:
    """Aggregates completed orders into dietary insights."""

    repository: OrderRepository
    now: Callable[[], datetime] = field(default=_utcnow)

    def analyze_nutrition_patterns(
        self, user_id: object, time_range: object = TimeRange.ALL
    ) -> NutritionPatterns:
        """Averages, favourites and macro distribution for the window."""
        uid = parse_user_id(user_id)
        window = parse_time_range(time_range, TimeRange.ALL)
        orders = self._completed_orders(uid, window)

        total = len(orders)
        restaurants: Counter[str] = Counter()
        items: Counter[str] = Counter()
        for order in orders:
            for line in order.lines:
                quantity = max(line.quantity, 1)
                if line.restaurant:
                    restaurants[line.restaurant] += quantity
                if line.item:
                    items[line.item] += quantity

        distribution = {
            name: _distribution(getter(order) for order in orders)
            for name, getter in _MACROS.items()
        }
        return NutritionPatterns(
            time_range=window,
            total_orders=total,
            average_calories=distribution["calories"].average,
            average_protein=distribution["protein"].average,
            average_fat=distribution["fat"].average,
            average_carbs=distribution["carbs"].average,
            most_ordered_restaurants=_top(restaurants),
            most_ordered_items=_top(items),
            nutrition_distribution=distribution,
        )

    def track_dietary_trends(
        self,
        user_id: object,
        period: object = TimeRange.MONTH,
        granularity: object = None,
        timezone_name: str = "UTC",
    ) -> DietaryTrends:
        """Bucket completed orders by date, oldest bucket first."""
        uid = parse_user_id(user_id)
        window = parse_time_range(period, TimeRange.MONTH)
        bucket = parse_granularity(granularity, _DEFAULT_GRANULARITY[window])
        tz = parse_timezone(timezone_name)
        orders = self._completed_orders(uid, window)

        buckets: dict[date, list[OrderRecord]] = {}
        for order in orders:
            key = _bucket_key(order.created_at, bucket, tz)
            buckets.setdefault(key, []).append(order)

        trends = [
            TrendPoint(
                date=day,
                order_count=len(group),
                calories=sum(o.nutrition.total_calories for o in group),
                protein=sum(o.nutrition.total_protein for o in group),
                fat=sum(o.nutrition.total_fat for o in group),
                carbs=sum(o.nutrition.total_carbohydrates for o in group),
            )
            for day, group in sorted(buckets.items())
        ]
        return DietaryTrends(period=window, granularity=bucket, trends=trends)

    def generate_personalized_recommendations(
        self, user_id: object
    ) -> list[PersonalizedRecommendation]:
        """Rule-based suggestions from last month's patterns and trend."""
        uid = parse_user_id(user_id)
        patterns = self.analyze_nutrition_patterns(uid, TimeRange.MONTH)
        trends = self.track_dietary_trends(uid, TimeRange.MONTH, Granularity.DAY)

        recommendations = []
        protein = _protein_rule(patterns)
        if protein is not None:
            recommendations.append(protein)
        diversity = _diversity_rule(patterns)
        if diversity is not None:
            recommendations.append(diversity)
        calories = _calorie_rule(trends)
        if calories is not None:
            recommendations.append(calories)
        _logger.info(
            "Generated %s recommendations for user %s", len(recommendations), uid
        )
        return recommendations

    def _completed_orders(self, user_id: UUID, window: TimeRange) -> list[OrderRecord]:
        since = window_start(self.now(), window)
        orders = self.repository.list_orders(user_id, since, COMPLETED)
        selected = [
            order
            for order in orders
            if order.is_completed
            and (since is None or _as_aware(order.created_at) >= since)
        ]
        return sorted(selected, key=lambda order: _as_aware(order.created_at))


def parse_user_id(value: object) -> UUID:
    """Return the user id as a UUID or raise InvalidUserId."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise InvalidUserId(value)
    try:
        return UUID(value.strip())
    except ValueError as exc:
        raise InvalidUserId(value) from exc


def parse_time_range(value: object, default: TimeRange) -> TimeRange:
    """Parse week/month/year/all, using the default when unset."""
    if value is None or value == "":
        return default
    try:
        return TimeRange(str(value).lower())
    except ValueError as exc:
        raise ValidationError(
            "timeRange must be one of week, month, year, all"
        ) from exc


def parse_granularity(value: object, default: Granularity) -> Granularity:
    """Parse day/month bucketing, using the default when unset."""
    if value is None or value == "":
        return default
    try:
        return Granularity(str(value).lower())
    except ValueError as exc:
        raise ValidationError("granularity must be day or month") from exc


def parse_timezone(name: object) -> ZoneInfo:
    """Return the IANA zone used for day boundaries."""
    if not isinstance(name, str) or not name.strip():
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {name}") from exc


def window_start(now: datetime, window: TimeRange) -> datetime | None:
    """Start of the analytics window, or None for an unbounded window."""
    days = _WINDOW_DAYS[window]
    if days is None:
        return None
    return _as_aware(now) - timedelta(days=days)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _bucket_key(created_at: datetime, granularity: Granularity, tz: ZoneInfo) -> date:
    local_day = _as_aware(created_at).astimezone(tz).date()
    if granularity is Granularity.MONTH:
        return local_day.replace(day=1)
    return local_day


def _distribution(values: Iterable[float]) -> NutrientDistribution:
    numbers = list(values)
    if not numbers:
        return NutrientDistribution(min=0.0, max=0.0, average=0.0, total=0.0)
    total = sum(numbers)
    return NutrientDistribution(
        min=min(numbers),
        max=max(numbers),
        average=total / len(numbers),
        total=total,
    )


def _top(counter: Counter[str]) -> list[NameCount]:
    # most_common keeps first-seen order for equal counts.
    return [
        NameCount(name=name, count=count)
        for name, count in counter.most_common(TOP_N)
    ]


def _protein_rule(patterns: NutritionPatterns) -> PersonalizedRecommendation | None:
    if patterns.average_protein >= PROTEIN_TARGET_G:
        return None
    return PersonalizedRecommendation(
        type=RecommendationType.PROTEIN_INCREASE,
        message=(
            f"Your orders average {patterns.average_protein:.0f}g of protein. "
            f"Adding a protein-rich item would bring you closer to "
            f"{PROTEIN_TARGET_G:.0f}g per meal."
        ),
        priority="high",
        data={
            "current_average": round(patterns.average_protein, 1),
            "target": PROTEIN_TARGET_G,
        },
    )


def _diversity_rule(patterns: NutritionPatterns) -> PersonalizedRecommendation | None:
    if patterns.total_orders < 2:  # noqa: PLR2004
        return None
    needed = min(DIVERSITY_MIN_DISTINCT, patterns.total_orders)
    distinct_restaurants = len(patterns.most_ordered_restaurants)
    distinct_items = len(patterns.most_ordered_items)
    if distinct_restaurants >= needed and distinct_items >= needed:
        return None
    return PersonalizedRecommendation(
        type=RecommendationType.DIVERSITY,
        message=(
            "You mostly order from the same places. Trying other restaurants "
            "and dishes helps you cover a wider range of nutrients."
        ),
        priority="medium",
        data={
            "distinct_restaurants": distinct_restaurants,
            "distinct_items": distinct_items,
            "total_orders": patterns.total_orders,
        },
    )


def _calorie_rule(trends: DietaryTrends) -> PersonalizedRecommendation | None:
    series = [point.average_calories for point in trends.trends]
    if len(series) < 2:  # noqa: PLR2004
        return None
    slope = _slope(series)
    baseline = sum(series) / len(series)
    latest = series[-1]
    data = {
        "slope": round(slope, 2),
        "baseline": round(baseline, 1),
        "latest": round(latest, 1),
    }
    if slope > 0 and latest >= baseline:
        return PersonalizedRecommendation(
            type=RecommendationType.CALORIE_REDUCTION,
            message=(
                "Your calories per order have been climbing. Lighter mains or "
                "smaller sides would help balance things out."
            ),
            priority="medium",
            data=data,
        )
    if slope < 0 and latest <= baseline:
        return PersonalizedRecommendation(
            type=RecommendationType.CALORIE_INCREASE,
            message=(
                "Your calories per order have been dropping. Make sure your "
                "meals still give you enough energy."
            ),
            priority="low",
            data=data,
        )
    return None


def _slope(series: list[float]) -> float:
    """Least-squares slope of the series against its index."""
    n = len(series)
    mean_x = (n - 1) / 2
    mean_y = sum(series) / n
    numerator = sum((x - mean_x) * (y - mean_y) for x, y in enumerate(series))
    denominator = sum((x - mean_x) ** 2 for x in range(n))
    return numerator / denominator if denominator else 0.0
