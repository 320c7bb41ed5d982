"""Storage-agnostic filter predicates."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from math import isfinite


@dataclass(frozen=True)
class Range:
    """Inclusive numeric bounds on a field; a missing side is unbounded."""

    field: str
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class ContainsCi:
    """Case-insensitive substring match on a text or list field."""

    field: str
    substring: str


@dataclass(frozen=True)
class NotContainsCi:
    """Negated case-insensitive substring match."""

    field: str
    substring: str


@dataclass(frozen=True)
class And:
    """All children must match. An empty And matches everything."""

    children: tuple["Predicate", ...] = ()


@dataclass(frozen=True)
class Or:
    """At least one child must match."""

    children: tuple["Predicate", ...] = ()


@dataclass(frozen=True)
class Not:
    """Negates its child."""

    child: "Predicate"


Predicate = Range | ContainsCi | NotContainsCi | And | Or | Not

MATCH_ALL: Predicate = And()


def conjoin(predicates: Iterable[Predicate]) -> Predicate:
    """Combine predicates with AND, collapsing trivial cases."""
    parts = tuple(p for p in predicates if not is_match_all(p))
    if not parts:
        return MATCH_ALL
    if len(parts) == 1:
        return parts[0]
    return And(parts)


def is_match_all(predicate: Predicate) -> bool:
    """Return True when the predicate places no constraint on records."""
    return isinstance(predicate, And) and all(
        is_match_all(child) for child in predicate.children
    )


def matches(predicate: Predicate, record: Mapping[str, object]) -> bool:  # noqa: PLR0911
    """Evaluate a predicate against a plain record."""
    if isinstance(predicate, And):
        return all(matches(child, record) for child in predicate.children)
    if isinstance(predicate, Or):
        return any(matches(child, record) for child in predicate.children)
    if isinstance(predicate, Not):
        return not matches(predicate.child, record)
    if isinstance(predicate, Range):
        return _in_range(record.get(predicate.field), predicate.min, predicate.max)
    if isinstance(predicate, ContainsCi):
        return _contains(record.get(predicate.field), predicate.substring)
    if isinstance(predicate, NotContainsCi):
        return not _contains(record.get(predicate.field), predicate.substring)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _in_range(value: object, low: float | None, high: float | None) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    if not isfinite(value):
        return False
    if low is not None and value < low:
        return False
    return not (high is not None and value > high)


def _contains(value: object, substring: str) -> bool:
    needle = substring.casefold()
    if isinstance(value, str):
        return needle in value.casefold()
    if isinstance(value, list | tuple | set | frozenset):
        return any(isinstance(v, str) and needle in v.casefold() for v in value)
    return False
