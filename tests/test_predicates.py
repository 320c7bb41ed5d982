"""Tests for the in-memory predicate interpreter."""

import pytest

from menu_recommender.domain.predicates import (
    MATCH_ALL,
    And,
    ContainsCi,
    Not,
    NotContainsCi,
    Or,
    Range,
    conjoin,
    is_match_all,
    matches,
)


def test_range_is_inclusive_and_requires_numbers() -> None:
    predicate = Range(field="calories", min=100, max=500)

    assert matches(predicate, {"calories": 100})
    assert matches(predicate, {"calories": 500})
    assert not matches(predicate, {"calories": 501})
    assert not matches(predicate, {"calories": None})
    assert not matches(predicate, {"calories": "300"})
    assert not matches(predicate, {"calories": True})
    assert not matches(predicate, {})


def test_contains_is_case_insensitive_on_text_and_lists() -> None:
    assert matches(ContainsCi("item_name", "BURGER"), {"item_name": "Cheeseburger"})
    assert matches(
        ContainsCi("ingredients", "onion"), {"ingredients": ("Red Onions", "bun")}
    )
    assert not matches(ContainsCi("ingredients", "onion"), {"ingredients": []})
    assert not matches(ContainsCi("vendor", "x"), {"vendor": None})


def test_not_contains_passes_when_field_missing() -> None:
    predicate = NotContainsCi("ingredients", "peanut")

    assert matches(predicate, {})
    assert matches(predicate, {"ingredients": ["bun"]})
    assert not matches(predicate, {"ingredients": ["Peanut Sauce"]})


def test_boolean_nodes() -> None:
    record = {"vendor": "Taco Stop", "item_name": "Bean Burrito"}

    assert matches(
        Or((ContainsCi("vendor", "burger"), ContainsCi("item_name", "burrito"))),
        record,
    )
    assert not matches(Or(()), record)
    assert matches(And(()), record)
    assert not matches(Not(ContainsCi("vendor", "taco")), record)


def test_conjoin_collapses_trivial_parts() -> None:
    leaf = Range(field="protein", min=20)

    assert conjoin([]) == MATCH_ALL
    assert conjoin([MATCH_ALL, leaf]) == leaf
    assert conjoin([leaf, leaf]) == And((leaf, leaf))
    assert is_match_all(And((And(()),)))
    assert not is_match_all(leaf)


def test_unknown_predicate_raises() -> None:
    with pytest.raises(TypeError):
        matches("calories > 5", {})  # type: ignore[arg-type]
