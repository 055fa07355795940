"""Canonical totals computation for nutrition results."""

from collections.abc import Iterable

from meal_tracker.domain.nutrition import FoodItem, NutritionResult


def normalize(items: Iterable[FoodItem]) -> NutritionResult:
    """Build a result whose totals are recomputed from its items.

    Calories are rounded to an integer and grams to one decimal. Rounding is
    applied to each sum, never to the individual items.
    """
    ordered = list(items)
    return NutritionResult(
        items=ordered,
        total_calories=round(sum(item.calories for item in ordered)),
        total_protein=round(sum(item.protein for item in ordered), 1),
        total_carbs=round(sum(item.carbs for item in ordered), 1),
        total_fats=round(sum(item.fats for item in ordered), 1),
    )
