"""Daily totals, goal progress and export."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from meal_tracker.domain.meals import Meal, MealTotals
from meal_tracker.domain.profiles import Goals, Principal
from meal_tracker.domain.stats import DailySummary, DayTotals, GoalProgress
from meal_tracker.services.meals import MealService
from meal_tracker.services.profiles import ProfileService


def aggregate(meals: Iterable[Meal | Mapping[str, object]]) -> DayTotals:
    """Sum meal totals field by field without rounding.

    Raw documents may carry either a nested ``totals`` record or flattened
    ``total*`` fields; missing values count as zero.
    """
    total = DayTotals()
    for meal in meals:
        totals = _resolve_totals(meal)
        total = DayTotals(
            calories=total.calories + totals.calories,
            protein=total.protein + totals.protein,
            carbs=total.carbs + totals.carbs,
            fats=total.fats + totals.fats,
        )
    return total


def goal_progress(totals: DayTotals, goals: Goals) -> GoalProgress:
    """Return percent of each goal reached, capped at 100."""
    return GoalProgress(
        calories=_percent(totals.calories, goals.calories),
        protein=_percent(totals.protein, goals.protein),
        carbs=_percent(totals.carbs, goals.carbs),
        fats=_percent(totals.fats, goals.fats),
    )


@dataclass
class DailySummaryService:
    """Builds today's summary and export snapshot for a user."""

    meal_service: MealService
    profile_service: ProfileService

    def get_today(self, principal: Principal) -> DailySummary:
        """Return today's meals, totals and progress towards goals."""
        meals = self.meal_service.list_today(principal.uid)
        goals = self.profile_service.get_goals(principal)
        totals = aggregate(meals)
        return DailySummary(
            day=self.meal_service.today(),
            meals=meals,
            totals=totals,
            goals=goals,
            progress=goal_progress(totals, goals),
        )

    def export_today(self, principal: Principal) -> dict[str, object]:
        """Return today's totals and meals as a JSON-ready document."""
        meals = self.meal_service.list_today(principal.uid)
        day = date.fromisoformat(self.meal_service.today())
        return {
            "date": format_export_date(day),
            "totals": aggregate(meals).to_dict(),
            "meals": [
                {
                    "time": meal.timestamp.isoformat(),
                    "description": meal.description,
                    "totals": meal.totals.to_dict(),
                }
                for meal in meals
            ],
        }


def format_export_date(day: date) -> str:
    """Format a day like ``Mon Oct 19 2026``."""
    return day.strftime("%a %b %d %Y")


def _resolve_totals(meal: Meal | Mapping[str, object]) -> MealTotals:
    if isinstance(meal, Meal):
        return meal.totals
    return MealTotals.from_document(meal)


def _percent(value: float, goal: float) -> float:
    if goal <= 0:
        return 0
    return min(value / goal * 100, 100)
