"""Ingredient-based recommendations.

The catalog query uses case-insensitive substring matching, while the match
score counts exact (case-folded) ingredient hits. An item can therefore pass
the query through a partial match and still score 0.

Ranking always runs over the full matching set before the page is sliced, so
concatenating pages 1..N reproduces the global ranking with no gaps or
duplicates.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from menu_recommender.domain.catalog import CatalogItem, RankedItem
from menu_recommender.domain.predicates import (
    ContainsCi,
    NotContainsCi,
    Predicate,
    conjoin,
)
from menu_recommender.services.catalog import CatalogRepository
from menu_recommender.services.nutrition import display_price, to_number

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_TERM_SEPARATORS = re.compile(r"[,\s]+")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngredientPage:
    """One page of the globally ranked result."""

    items: list[RankedItem]
    total: int
    page: int
    limit: int
    include: list[str]
    exclude: list[str]

    @property
    def count(self) -> int:
        """Number of items on this page."""
        return len(self.items)


def parse_terms(raw: str | Iterable[str] | None) -> list[str]:
    """Case-fold, split on commas/whitespace and dedupe ingredient terms."""
    if raw is None:
        return []
    chunks = [raw] if isinstance(raw, str) else [str(part) for part in raw]
    terms: list[str] = []
    for chunk in chunks:
        terms.extend(t for t in _TERM_SEPARATORS.split(chunk.casefold()) if t)
    return list(dict.fromkeys(terms))


def normalize_terms(
    include: str | Iterable[str] | None, exclude: str | Iterable[str] | None
) -> tuple[list[str], list[str]]:
    """Parse both lists and drop excluded terms that are also included."""
    include_terms = parse_terms(include)
    exclude_terms = [t for t in parse_terms(exclude) if t not in include_terms]
    return include_terms, exclude_terms


def clamp_limit(
    limit: object, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT
) -> int:
    """Return a page size in [1, maximum]; invalid values use the default."""
    number = to_number(limit)
    if number is None or number < 1:
        return min(default, maximum)
    return min(int(number), maximum)


def clamp_page(page: object) -> int:
    """Return a 1-based page number; anything below 1 becomes 1."""
    number = to_number(page)
    if number is None or number < 1:
        return 1
    return int(number)


def build_ingredient_query(include: list[str], exclude: list[str]) -> Predicate:
    """Every include term must be present, no exclude term may be."""
    return conjoin(
        [
            conjoin(ContainsCi(field="ingredients", substring=t) for t in include),
            conjoin(NotContainsCi(field="ingredients", substring=t) for t in exclude),
        ]
    )


def match_score(item: CatalogItem, include: list[str]) -> int:
    """Count include terms exactly present among the item's ingredients."""
    ingredients = {i.casefold() for i in item.ingredients if isinstance(i, str)}
    return sum(1 for term in include if term.casefold() in ingredients)


def rank_items(items: Iterable[CatalogItem], include: list[str]) -> list[RankedItem]:
    """Rank by match score desc, then calories asc with missing calories last."""
    ranked = [
        RankedItem(
            item=item,
            match_score=match_score(item, include),
            price=display_price(item),
        )
        for item in items
    ]
    ranked.sort(key=_rank_key)
    return ranked


def paginate(ranked: list[RankedItem], page: int, limit: int) -> list[RankedItem]:
    """Slice a fully ranked list."""
    skip = max(0, (page - 1) * limit)
    return ranked[skip : skip + limit]


def _rank_key(ranked: RankedItem) -> tuple[int, bool, float, str]:
    calories = to_number(ranked.item.calories)
    return (
        -ranked.match_score,
        calories is None,
        calories if calories is not None else 0.0,
        str(ranked.item.id),
    )


@dataclass
class IngredientRecommendationService:
    """Recommends catalog items by ingredients to include or avoid."""

    catalog: CatalogRepository
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT

    def recommend(
        self,
        include: str | Iterable[str] | None = None,
        exclude: str | Iterable[str] | None = None,
        page: object = 1,
        limit: object = None,
    ) -> IngredientPage:
        """Return one page of the global ranking for the ingredient terms."""
        include_terms, exclude_terms = normalize_terms(include, exclude)
        page_number = clamp_page(page)
        page_size = clamp_limit(limit, self.default_limit, self.max_limit)

        predicate = build_ingredient_query(include_terms, exclude_terms)
        candidates = self.catalog.find_items(predicate)
        ranked = rank_items(candidates, include_terms)
        _logger.info(
            "Ingredient ranking: include=%s exclude=%s matched=%s",
            include_terms,
            exclude_terms,
            len(ranked),
        )
        return IngredientPage(
            items=paginate(ranked, page_number, page_size),
            total=len(ranked),
            page=page_number,
            limit=page_size,
            include=include_terms,
            exclude=exclude_terms,
        )
