"""Compile structured criteria into filter predicates and orderings."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from menu_recommender.domain.criteria import Criteria, SortDirective
from menu_recommender.domain.errors import InvalidCriteriaShape
from menu_recommender.domain.predicates import (
    ContainsCi,
    Or,
    Predicate,
    Range,
    conjoin,
)

KEYWORD_FIELDS = ("item_name", "vendor", "ingredients")


@dataclass(frozen=True)
class CompiledCriteria:
    """Filter predicate plus the sort directive kept out of it."""

    predicate: Predicate
    sort: SortDirective | None


@dataclass(frozen=True)
class Ordering:
    """Field ordering applied to results."""

    field: str
    descending: bool = False


def compile_criteria(criteria: Criteria | Mapping[str, object]) -> CompiledCriteria:
    """Map criteria into a predicate tree; sort never becomes a leaf."""
    parsed = (
        criteria if isinstance(criteria, Criteria) else Criteria.from_mapping(criteria)
    )
    leaves: list[Predicate] = []
    for name, bounds in parsed.nutrients.items():
        if name == "sort":
            raise InvalidCriteriaShape("sort cannot be compiled as a field filter")
        leaves.append(Range(field=name, min=bounds.min, max=bounds.max))
    if parsed.item_name:
        leaves.append(ContainsCi(field="item_name", substring=parsed.item_name))
    if parsed.keywords:
        leaves.append(keyword_predicate(parsed.keywords))
    return CompiledCriteria(predicate=conjoin(leaves), sort=parsed.sort)


def keyword_predicate(keywords: Iterable[str]) -> Predicate:
    """Every keyword must appear in the item name, vendor or an ingredient."""
    return conjoin(
        Or(tuple(ContainsCi(field=name, substring=word) for name in KEYWORD_FIELDS))
        for word in keywords
    )


def default_ordering(criteria: Criteria) -> Ordering | None:
    """Ordering implied by the nutrient bounds when no sort was requested."""
    protein = criteria.nutrients.get("protein")
    if protein is not None and protein.min is not None:
        return Ordering(field="protein", descending=True)
    calories = criteria.nutrients.get("calories")
    if calories is not None and calories.max is not None:
        return Ordering(field="calories")
    fat = criteria.nutrients.get("total_fat")
    if fat is not None and fat.max is not None:
        return Ordering(field="total_fat")
    return None


def ordering_for(criteria: Criteria) -> Ordering | None:
    """Explicit sort directive first, then the nutrient default."""
    if criteria.sort is SortDirective.PRICE_ASC:
        return Ordering(field="price")
    if criteria.sort is SortDirective.PRICE_DESC:
        return Ordering(field="price", descending=True)
    return default_ordering(criteria)
