"""Recommend catalog items from a natural-language query."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from menu_recommender.domain.catalog import RankedItem
from menu_recommender.domain.criteria import Criteria
from menu_recommender.domain.errors import ValidationError
from menu_recommender.services.catalog import CatalogRepository
from menu_recommender.services.compiler import Ordering, ordering_for
from menu_recommender.services.criteria import CriteriaResolver
from menu_recommender.services.nutrition import display_price, to_number

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryRecommendations:
    """Ordered recommendations for a query."""

    query: str
    criteria: Criteria
    recommendations: list[RankedItem]
    used_fallback: bool

    @property
    def count(self) -> int:
        """Number of recommendations."""
        return len(self.recommendations)

    @property
    def message(self) -> str:
        """User-facing summary line."""
        return (
            f"Here are {self.count} recommendations based on your preferences"
        )


@dataclass
class RecommendationService:
    """Resolves a query, filters the catalog and orders the matches."""

    resolver: CriteriaResolver
    catalog: CatalogRepository

    async def recommend(
        self,
        query: object,
        previous_criteria: Criteria | Mapping[str, object] | None = None,
    ) -> QueryRecommendations:
        """Return catalog items matching the user's request."""
        resolution = await self.resolver.resolve(query, previous_criteria)
        criteria = resolution.criteria
        if criteria.is_empty:
            raise ValidationError(
                "Your query does not contain recognizable food or nutritional "
                "requirements. Please try again with a food-related query."
            )

        items = self.catalog.find_items(resolution.filter)
        ranked = [
            RankedItem(item=item, match_score=0, price=display_price(item))
            for item in items
        ]
        ordered = apply_ordering(ranked, ordering_for(criteria))
        _logger.info(
            "Query recommendations: fallback=%s results=%s",
            resolution.used_fallback,
            len(ordered),
        )
        return QueryRecommendations(
            query=str(query).strip(),
            criteria=criteria,
            recommendations=ordered,
            used_fallback=resolution.used_fallback,
        )


def apply_ordering(
    items: list[RankedItem], ordering: Ordering | None
) -> list[RankedItem]:
    """Sort by the ordering field; items missing the field go last."""
    if ordering is None:
        return list(items)
    present: list[tuple[float, RankedItem]] = []
    missing: list[RankedItem] = []
    for ranked in items:
        value = _ordering_value(ranked, ordering.field)
        if value is None:
            missing.append(ranked)
        else:
            present.append((value, ranked))
    present.sort(key=lambda pair: pair[0], reverse=ordering.descending)
    return [ranked for _, ranked in present] + missing


def _ordering_value(ranked: RankedItem, field: str) -> float | None:
    if field == "price":
        return ranked.price
    return to_number(getattr(ranked.item, field, None))
