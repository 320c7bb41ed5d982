"""Translate filter predicates into PostgREST logic trees."""

from menu_recommender.domain.predicates import (
    And,
    ContainsCi,
    Not,
    NotContainsCi,
    Or,
    Predicate,
    Range,
    is_match_all,
)

COLUMNS = {
    "vendor": "company",
    "item_name": "item",
    "ingredients": "ingredients_text",
}

_ALWAYS = "id.not.is.null"
_NEVER = "id.is.null"


def compile_predicate(predicate: Predicate) -> str | None:
    """Return a logic tree usable with `or_`, or None when nothing is filtered.

    The result is always a single `and(...)`/`or(...)` group so it can be
    passed as the only member of an `or=(...)` filter.
    """
    if is_match_all(predicate):
        return None
    expression = _expression(predicate)
    if isinstance(predicate, And | Or):
        return expression
    return f"and({expression})"


def column_for(field: str) -> str:
    """Map a logical field name to its catalog column."""
    return COLUMNS.get(field, field)


def _expression(predicate: Predicate) -> str:  # noqa: PLR0911
    if isinstance(predicate, And):
        children = [c for c in predicate.children if not is_match_all(c)]
        if not children:
            return _ALWAYS
        return f"and({','.join(_expression(c) for c in children)})"
    if isinstance(predicate, Or):
        if not predicate.children:
            return _NEVER
        return f"or({','.join(_expression(c) for c in predicate.children)})"
    if isinstance(predicate, Not):
        inner = predicate.child
        if isinstance(inner, And | Or):
            return f"not.{_expression(inner)}"
        return f"not.and({_expression(inner)})"
    if isinstance(predicate, Range):
        return _range(predicate)
    if isinstance(predicate, ContainsCi):
        return f"{column_for(predicate.field)}.ilike.{_pattern(predicate.substring)}"
    if isinstance(predicate, NotContainsCi):
        column = column_for(predicate.field)
        return (
            f"or({column}.is.null,"
            f"{column}.not.ilike.{_pattern(predicate.substring)})"
        )
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _range(predicate: Range) -> str:
    column = column_for(predicate.field)
    parts = []
    if predicate.min is not None:
        parts.append(f"{column}.gte.{_number(predicate.min)}")
    if predicate.max is not None:
        parts.append(f"{column}.lte.{_number(predicate.max)}")
    if not parts:
        return f"{column}.not.is.null"
    if len(parts) == 1:
        return parts[0]
    return f"and({','.join(parts)})"


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _pattern(substring: str) -> str:
    """Quote a substring as an ilike pattern.

    LIKE metacharacters are escaped; '*' is PostgREST's wildcard and has no
    escape, so it is dropped from the needle.
    """
    needle = substring.replace("*", "")
    for char in ("\\", "%", "_"):
        needle = needle.replace(char, f"\\{char}")
    quoted = needle.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{quoted}*"'
