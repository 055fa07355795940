"""Domain models for meal logging."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from meal_tracker.domain.nutrition import FoodItem, NutritionResult

_FLAT_KEYS = {
    "calories": ("total_calories", "totalCalories"),
    "protein": ("total_protein", "totalProtein"),
    "carbs": ("total_carbs", "totalCarbs"),
    "fats": ("total_fats", "totalFats"),
}


@dataclass(frozen=True)
class MealTotals:
    """Nested totals stored on a meal document."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0

    @classmethod
    def from_result(cls, result: NutritionResult) -> "MealTotals":
        """Copy the totals of an analysis result."""
        return cls(
            calories=result.total_calories,
            protein=result.total_protein,
            carbs=result.total_carbs,
            fats=result.total_fats,
        )

    @classmethod
    def from_document(cls, document: Mapping[str, object]) -> "MealTotals":
        """Resolve totals from a nested or flattened meal document."""
        nested = document.get("totals")
        if isinstance(nested, Mapping):
            return cls(
                calories=_number(nested.get("calories")),
                protein=_number(nested.get("protein")),
                carbs=_number(nested.get("carbs")),
                fats=_number(nested.get("fats")),
            )
        values = {
            field_name: _first_number(document, keys)
            for field_name, keys in _FLAT_KEYS.items()
        }
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        """Return the nested document representation."""
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


@dataclass(frozen=True)
class Meal:
    """A logged eating event owned by one user."""

    id: str
    user_id: str
    description: str
    items: list[FoodItem]
    totals: MealTotals
    timestamp: datetime
    date: str
    updated_at: datetime | None = None


def _first_number(document: Mapping[str, object], keys: tuple[str, ...]) -> float:
    for key in keys:
        if document.get(key) is not None:
            return _number(document.get(key))
    return 0


def _number(value: object) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0
    return 0
