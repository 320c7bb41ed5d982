"""Nutrition normalization and compatibility scoring.

All functions here are pure and tolerate malformed records: missing or
non-numeric values are coerced instead of raising, so a single bad catalog
row never aborts scoring for a whole batch.
"""

import dataclasses
import re
from collections.abc import Mapping
from dataclasses import dataclass
from math import isfinite
from numbers import Real

from pydantic import BaseModel

from menu_recommender.domain.catalog import CatalogItem
from menu_recommender.domain.combos import ComboPreferences

MIN_PRICE = 2.0
MAX_PRICE = 15.0
PRICE_PER_CALORIE = 0.01

HIGH_SUGAR_G = 15
LOW_SUGAR_THRESHOLD_G = 8
HIGH_SODIUM_MG = 700

_LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?")

_ALIASES: dict[str, tuple[str, ...]] = {
    "calories": ("calories", "cal", "energy"),
    "protein_g": ("protein_g", "protein", "prot_g"),
    "fat_g": ("fat_g", "total_fat", "fat", "lipids"),
    "carbs_g": ("carbs_g", "carbs", "carbohydrates"),
    "sugar_g": ("sugar_g", "sugars", "sugar"),
    "sodium_mg": ("sodium_mg", "sodium", "salt_mg"),
}


@dataclass(frozen=True)
class NutritionProfile:
    """Fixed-shape nutrition record used for scoring."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0
    sugar_g: float = 0.0
    sodium_mg: float = 0.0


def to_plain_record(obj: object) -> dict[str, object]:
    """Convert mappings, dataclasses and pydantic models into a plain dict."""
    if isinstance(obj, Mapping):
        return dict(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    return {}


def to_number(value: object) -> float | None:
    """Coerce a stored value into a finite float, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Real):
        number = float(value)
        return number if isfinite(number) else None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            number = float(text)
        except ValueError:
            # Values with units such as "250mg".
            match = _LEADING_NUMBER.search(text)
            if match is None:
                return None
            number = float(match.group())
        return number if isfinite(number) else None
    return None


def normalize(record: object) -> NutritionProfile:
    """Normalize heterogeneous nutrition shapes into a NutritionProfile."""
    plain = to_plain_record(record)
    nested = plain.get("nutrition")
    source = to_plain_record(nested) if nested is not None else plain
    if not source:
        source = plain
    values: dict[str, float] = {}
    for name, aliases in _ALIASES.items():
        values[name] = _first_number(source, aliases)
    return NutritionProfile(**values)


def clamp01(value: float) -> float:
    """Bound a score to [0, 1], mapping NaN and infinities to 0."""
    if not isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


def compatibility(
    main: object,
    candidate: object,
    preferences: ComboPreferences | None = None,
) -> float:
    """Score how well a candidate complements a main item, in [0, 1]."""
    prefs = preferences or ComboPreferences()
    main_n = normalize(main)
    cand_n = normalize(candidate)

    cal_diff = abs(main_n.calories - cand_n.calories) / max(1.0, main_n.calories)
    cal_balance = clamp01(1 - cal_diff)

    if main_n.carbs_g > 0:
        protein_ratio = cand_n.protein_g / main_n.carbs_g
    else:
        protein_ratio = cand_n.protein_g / 10
    protein_score = clamp01(protein_ratio * 2)

    both_sweet = main_n.sugar_g > HIGH_SUGAR_G and cand_n.sugar_g > HIGH_SUGAR_G
    sugar_penalty = 0.5 if both_sweet else 1.0

    raw = 0.45 * cal_balance + 0.4 * protein_score + 0.15 * sugar_penalty
    sodium_penalty = (
        0.6 if prefs.low_sodium and cand_n.sodium_mg > HIGH_SODIUM_MG else 1.0
    )
    score = clamp01(raw * sodium_penalty)

    if prefs.low_sugar:
        sugar_factor = 0.7 if cand_n.sugar_g > LOW_SUGAR_THRESHOLD_G else 1.0
        return clamp01(score * sugar_factor)
    return score


def calculate_price(calories: object) -> float:
    """Estimate a price from calories, clamped to [2.00, 15.00]."""
    number = to_number(calories)
    if number is None or number <= 0:
        return MIN_PRICE
    return round(min(max(number * PRICE_PER_CALORIE, MIN_PRICE), MAX_PRICE), 2)


def display_price(item: CatalogItem) -> float:
    """Prefer a stored numeric price, else the calorie-based estimate."""
    stored = to_number(item.stored_price)
    if stored is not None:
        return stored
    return calculate_price(item.calories)


def _first_number(source: Mapping[str, object], aliases: tuple[str, ...]) -> float:
    for alias in aliases:
        number = to_number(source.get(alias))
        if number is not None:
            return number
    return 0.0
