"""camelCase payloads for the HTTP surface."""

from menu_recommender.domain.analytics import (
    DietaryTrends,
    NameCount,
    NutrientDistribution,
    NutritionPatterns,
    PersonalizedRecommendation,
    TrendPoint,
)
from menu_recommender.domain.catalog import CatalogItem, RankedItem
from menu_recommender.domain.combos import ComboSuggestion
from menu_recommender.services.nutrition import display_price

_NUTRIENT_KEYS = {
    "calories": "calories",
    "calories_from_fat": "caloriesFromFat",
    "total_fat": "totalFat",
    "saturated_fat": "saturatedFat",
    "trans_fat": "transFat",
    "cholesterol": "cholesterol",
    "sodium": "sodium",
    "carbs": "carbs",
    "fiber": "fiber",
    "sugars": "sugars",
    "protein": "protein",
    "weight_watchers_points": "weightWatchersPoints",
}


def catalog_item_payload(
    item: CatalogItem, price: float | None = None
) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": str(item.id),
        "company": item.vendor,
        "item": item.item_name,
    }
    for field_name, key in _NUTRIENT_KEYS.items():
        payload[key] = getattr(item, field_name)
    payload["ingredients"] = list(item.ingredients)
    payload["price"] = display_price(item) if price is None else price
    return payload


def ranked_item_payload(ranked: RankedItem) -> dict[str, object]:
    return {
        **catalog_item_payload(ranked.item, ranked.price),
        "matchScore": ranked.match_score,
    }


def combo_suggestion_payload(suggestion: ComboSuggestion) -> dict[str, object]:
    payload: dict[str, object] = {
        "item": catalog_item_payload(suggestion.item),
        "reason": suggestion.reason.value,
        "popularityScore": round(suggestion.popularity_score, 4),
        "nutritionalScore": round(suggestion.nutritional_score, 4),
    }
    # Fallback suggestions have no pairing history.
    if suggestion.frequency is not None:
        payload["frequency"] = suggestion.frequency
    if suggestion.popularity is not None:
        payload["popularity"] = suggestion.popularity
    return payload


def patterns_payload(patterns: NutritionPatterns) -> dict[str, object]:
    return {
        "timeRange": patterns.time_range.value,
        "totalOrders": patterns.total_orders,
        "averageCalories": round(patterns.average_calories, 1),
        "averageProtein": round(patterns.average_protein, 1),
        "averageFat": round(patterns.average_fat, 1),
        "averageCarbs": round(patterns.average_carbs, 1),
        "mostOrderedRestaurants": [
            _name_count(entry) for entry in patterns.most_ordered_restaurants
        ],
        "mostOrderedItems": [
            _name_count(entry) for entry in patterns.most_ordered_items
        ],
        "nutritionDistribution": {
            name: _distribution(entry)
            for name, entry in patterns.nutrition_distribution.items()
        },
    }


def trends_payload(trends: DietaryTrends) -> dict[str, object]:
    return {
        "period": trends.period.value,
        "granularity": trends.granularity.value,
        "trends": [_trend_point(point) for point in trends.trends],
    }


def recommendation_payload(
    recommendation: PersonalizedRecommendation,
) -> dict[str, object]:
    return {
        "type": recommendation.type.value,
        "message": recommendation.message,
        "priority": recommendation.priority,
        "data": recommendation.data,
    }


def _name_count(entry: NameCount) -> dict[str, object]:
    return {"name": entry.name, "count": entry.count}


def _distribution(entry: NutrientDistribution) -> dict[str, float]:
    return {
        "min": entry.min,
        "max": entry.max,
        "average": round(entry.average, 1),
        "total": entry.total,
    }


def _trend_point(point: TrendPoint) -> dict[str, object]:
    return {
        "date": point.date.isoformat(),
        "orderCount": point.order_count,
        "calories": point.calories,
        "protein": point.protein,
        "fat": point.fat,
        "carbs": point.carbs,
        "averageCalories": round(point.average_calories, 1),
    }
