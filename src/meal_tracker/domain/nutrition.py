"""Nutrition domain models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FoodItem:
    """One identified food component of a meal."""

    name: str
    quantity: float
    unit: str
    calories: float
    protein: float
    carbs: float
    fats: float

    def to_dict(self) -> dict[str, object]:
        """Return the document representation of the item."""
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


@dataclass(frozen=True)
class NutritionResult:
    """Canonical nutrition breakdown for one meal description."""

    items: list[FoodItem] = field(default_factory=list)
    total_calories: float = 0
    total_protein: float = 0
    total_carbs: float = 0
    total_fats: float = 0

    def to_dict(self) -> dict[str, object]:
        """Return the wire representation of the result."""
        return {
            "items": [item.to_dict() for item in self.items],
            "totalCalories": self.total_calories,
            "totalProtein": self.total_protein,
            "totalCarbs": self.total_carbs,
            "totalFats": self.total_fats,
        }
