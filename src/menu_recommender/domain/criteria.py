"""Structured search criteria and resolution results."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar

from menu_recommender.domain.errors import InvalidCriteriaShape
from menu_recommender.domain.predicates import Predicate

NUTRIENT_FIELDS = (
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

# Legacy clients and older prompts used camelCase or short names.
_NUTRIENT_ALIASES: dict[str, str] = {name: name for name in NUTRIENT_FIELDS} | {
    "caloriesFromFat": "calories_from_fat",
    "totalFat": "total_fat",
    "fat": "total_fat",
    "saturatedFat": "saturated_fat",
    "transFat": "trans_fat",
    "carbohydrates": "carbs",
    "sugar": "sugars",
    "weightWatchersPoints": "weight_watchers_points",
}


class SortDirective(StrEnum):
    """Presentation ordering requested by the user."""

    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


@dataclass(frozen=True)
class NutrientBounds:
    """Inclusive bounds for a single nutrient."""

    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class Criteria:
    """Structured representation of what the user is looking for."""

    nutrients: Mapping[str, NutrientBounds] = field(default_factory=dict)
    item_name: str | None = None
    sort: SortDirective | None = None
    keywords: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if "sort" in self.nutrients:
            raise InvalidCriteriaShape(
                "sort is a presentation directive and cannot be filtered on"
            )

    @property
    def is_empty(self) -> bool:
        """Return True when no filter and no ordering were requested."""
        return not (self.nutrients or self.item_name or self.sort or self.keywords)

    @classmethod
    def from_mapping(cls, raw: object) -> "Criteria":
        """Parse criteria JSON as produced by clients or the language service."""
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise InvalidCriteriaShape("Criteria must be an object")

        nutrients: dict[str, NutrientBounds] = {}
        item_name: str | None = None
        sort: SortDirective | None = None
        keywords: tuple[str, ...] = ()
        for key, value in raw.items():
            if key == "sort":
                sort = _parse_sort(value)
            elif key == "item":
                item_name = _parse_item_name(value)
            elif key == "keywords":
                keywords = _parse_keywords(value)
            elif key in _NUTRIENT_ALIASES:
                bounds = _parse_bounds(key, value)
                if bounds is not None:
                    nutrients[_NUTRIENT_ALIASES[key]] = bounds
        return cls(
            nutrients=nutrients, item_name=item_name, sort=sort, keywords=keywords
        )

    def to_mapping(self) -> dict[str, object]:
        """Serialize back into the JSON shape accepted by from_mapping."""
        payload: dict[str, object] = {}
        for name, bounds in self.nutrients.items():
            entry: dict[str, float] = {}
            if bounds.min is not None:
                entry["min"] = bounds.min
            if bounds.max is not None:
                entry["max"] = bounds.max
            payload[name] = entry
        if self.item_name:
            payload["item"] = {"name": self.item_name}
        if self.keywords:
            payload["keywords"] = list(self.keywords)
        if self.sort is not None:
            payload["sort"] = self.sort.value
        return payload


@dataclass(frozen=True)
class Resolved:
    """Criteria produced by the language-understanding service."""

    criteria: Criteria
    filter: Predicate
    used_fallback: ClassVar[bool] = False


@dataclass(frozen=True)
class Fallback:
    """Criteria produced by keyword tokenization after the service failed."""

    criteria: Criteria
    filter: Predicate
    used_fallback: ClassVar[bool] = True


Resolution = Resolved | Fallback


def _parse_sort(value: object) -> SortDirective | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        raise InvalidCriteriaShape(
            "sort is a presentation directive and cannot be filtered on"
        )
    try:
        return SortDirective(str(value))
    except ValueError as exc:
        raise InvalidCriteriaShape(f"Unknown sort directive: {value!r}") from exc


def _parse_item_name(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("name")
        if value is None:
            return None
    if not isinstance(value, str):
        raise InvalidCriteriaShape("item.name must be a string")
    return value.strip() or None


def _parse_keywords(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list | tuple):
        raise InvalidCriteriaShape("keywords must be a list of strings")
    return tuple(str(word).casefold() for word in value if str(word).strip())


def _parse_bounds(key: str, value: object) -> NutrientBounds | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise InvalidCriteriaShape(f"{key} must be an object with min/max")
    low = _parse_bound(key, value.get("min"))
    high = _parse_bound(key, value.get("max"))
    if low is None and high is None:
        return None
    return NutrientBounds(min=low, max=high)


def _parse_bound(key: str, value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidCriteriaShape(f"{key} bounds must be numeric")
    return float(value)
