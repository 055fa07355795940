"""Domain models for daily statistics."""

from dataclasses import dataclass

from meal_tracker.domain.meals import Meal
from meal_tracker.domain.profiles import Goals


@dataclass(frozen=True)
class DayTotals:
    """Unrounded macro sums for one day."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0

    def to_dict(self) -> dict[str, float]:
        """Return the export representation."""
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


@dataclass(frozen=True)
class GoalProgress:
    """Percent of each goal reached, capped at 100."""

    calories: float
    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class DailySummary:
    """Today's meals with totals compared to goals."""

    day: str
    meals: list[Meal]
    totals: DayTotals
    goals: Goals
    progress: GoalProgress
