"""Tests for nutrition normalization, pricing and compatibility."""

import random

import pytest
from pydantic import BaseModel

from menu_recommender.domain.combos import ComboPreferences
from menu_recommender.services.nutrition import (
    calculate_price,
    clamp01,
    compatibility,
    display_price,
    normalize,
    to_number,
    to_plain_record,
)
from tests.conftest import make_item


@pytest.mark.parametrize(
    ("calories", "expected"),
    [
        (500, 5.0),
        (550, 5.5),
        (1234, 12.34),
        (100, 2.0),
        (2000, 15.0),
        (0, 2.0),
        (-50, 2.0),
        (None, 2.0),
        ("not a number", 2.0),
        ("650 kcal", 6.5),
        ("5.5e2", 5.5),
    ],
)
def test_calculate_price(calories: object, expected: float) -> None:
    assert calculate_price(calories) == expected


def test_display_price_prefers_stored_price() -> None:
    assert display_price(make_item(1, calories=800, stored_price=3.99)) == 3.99
    assert display_price(make_item(2, calories=800)) == 8.0
    assert display_price(make_item(3)) == 2.0


def test_to_number_coerces_and_rejects() -> None:
    assert to_number("12g") == 12.0
    assert to_number("1.5e3") == 1500.0
    assert to_number(" 2.5E-1 ") == 0.25
    assert to_number("1,200") == 1200.0
    assert to_number("-3.5 g") == -3.5
    assert to_number("abc") is None
    assert to_number("nan") is None
    assert to_number("inf") is None
    assert to_number(7) == 7.0
    assert to_number(True) is None
    assert to_number(None) is None
    assert to_number("") is None
    assert to_number(float("nan")) is None
    assert to_number(float("inf")) is None
    assert to_number([1]) is None


def test_normalize_reads_nested_nutrition() -> None:
    profile = normalize({"nutrition": {"calories": "300", "protein": 20, "sugar": 4}})

    assert profile.calories == 300
    assert profile.protein_g == 20
    assert profile.sugar_g == 4
    assert profile.sodium_mg == 0


def test_to_plain_record_handles_models_and_dataclasses() -> None:
    class Snack(BaseModel):
        calories: float
        protein: float

    assert to_plain_record(Snack(calories=120, protein=3)) == {
        "calories": 120,
        "protein": 3,
    }
    assert to_plain_record(make_item(1, calories=10))["calories"] == 10
    assert to_plain_record("burger") == {}


def test_clamp01_bounds_and_non_finite() -> None:
    assert clamp01(-1) == 0.0
    assert clamp01(2) == 1.0
    assert clamp01(0.25) == 0.25
    assert clamp01(float("nan")) == 0.0


def test_compatibility_balanced_pair_scores_one() -> None:
    main = {"calories": 500, "carbs": 50, "protein": 20, "sugars": 5}
    side = {"calories": 500, "protein": 25, "sugars": 2}

    assert compatibility(main, side) == pytest.approx(1.0)


def test_compatibility_penalizes_two_sweet_items() -> None:
    main = {"calories": 400, "sugars": 20}
    dessert = {"calories": 400, "sugars": 30}

    assert compatibility(main, dessert) == pytest.approx(0.525)


def test_compatibility_applies_preferences() -> None:
    main = {"calories": 500}
    salty = {"calories": 500, "sodium": 900}
    sweet = {"calories": 500, "sugars": 10}

    assert compatibility(main, salty) == pytest.approx(0.6)
    assert compatibility(
        main, salty, ComboPreferences(low_sodium=True)
    ) == pytest.approx(0.36)
    assert compatibility(
        main, sweet, ComboPreferences(low_sugar=True)
    ) == pytest.approx(0.42)


def test_compatibility_of_empty_records() -> None:
    assert compatibility({}, {}) == pytest.approx(0.6)
    assert compatibility(None, make_item(1)) == pytest.approx(0.6)


def test_compatibility_treats_non_finite_carbs_as_missing() -> None:
    side = {"calories": 500, "protein": 5}

    for carbs in (float("nan"), float("inf"), "nan"):
        main = {"calories": 500, "carbs": carbs}
        assert compatibility(main, side) == pytest.approx(1.0)


def test_compatibility_always_within_unit_interval() -> None:
    rng = random.Random(7)
    values: list[object] = [
        None,
        "",
        "abc",
        -500,
        0,
        3.5,
        10_000,
        "250mg",
        True,
        float("nan"),
        float("inf"),
        float("-inf"),
        "nan",
        "inf",
    ]

    def record() -> dict[str, object]:
        return {
            name: rng.choice([*values, rng.uniform(-1e6, 1e6)])
            for name in ("calories", "protein", "carbs", "sugars", "sodium")
        }

    for _ in range(500):
        preferences = ComboPreferences(
            low_sugar=rng.random() < 0.5, low_sodium=rng.random() < 0.5
        )
        score = compatibility(record(), record(), preferences)
        assert 0.0 <= score <= 1.0
