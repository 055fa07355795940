"""Meal logging service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from zoneinfo import ZoneInfo

from meal_tracker.domain.analysis import AnalysisOutcome
from meal_tracker.domain.meals import Meal, MealTotals
from meal_tracker.domain.nutrition import FoodItem
from meal_tracker.errors import InvalidInputError, MealNotFoundError, StorageError
from meal_tracker.services.analysis import NutritionAnalysisService

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class MealRepository(Protocol):
    """Persistence interface for meal documents."""

    def create_meal(  # noqa: PLR0913
        self,
        user_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
        timestamp: datetime,
        day: str,
    ) -> Meal:
        """Create a meal document and return it with its new id."""

    def replace_meal(
        self,
        user_id: str,
        meal_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
    ) -> Meal | None:
        """Replace the analyzed fields of a meal; None when it does not exist."""

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        """Delete a meal; False when it does not exist."""

    def list_meals_for_day(self, user_id: str, day: str) -> list[Meal]:
        """Return the user's meals tagged with a day key."""


def day_key(moment: datetime, timezone_name: str) -> str:
    """Return the ISO calendar day of an instant in a timezone."""
    return moment.astimezone(ZoneInfo(timezone_name)).date().isoformat()


@dataclass
class MealService:
    """Validates descriptions, analyzes them and persists meals."""

    analysis_service: NutritionAnalysisService
    repository: MealRepository
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def preview(self, description: str) -> AnalysisOutcome:
        """Analyze a description without persisting anything."""
        cleaned = _require_description(description)
        return await self.analysis_service.analyze_detailed(cleaned)

    async def log_meal(self, user_id: str, description: str) -> Meal:
        """Analyze a description and store it as a new meal."""
        cleaned = _require_description(description)
        result = await self.analysis_service.analyze(cleaned)
        now = self.clock()
        return self._call_storage(
            "create meal",
            lambda: self.repository.create_meal(
                user_id=user_id,
                description=cleaned,
                items=result.items,
                totals=MealTotals.from_result(result),
                timestamp=now,
                day=day_key(now, self.timezone_name),
            ),
        )

    async def edit_meal(self, user_id: str, meal_id: str, description: str) -> Meal:
        """Re-analyze a meal and replace its description, items and totals."""
        cleaned = _require_description(description)
        result = await self.analysis_service.analyze(cleaned)
        updated = self._call_storage(
            "update meal",
            lambda: self.repository.replace_meal(
                user_id=user_id,
                meal_id=meal_id,
                description=cleaned,
                items=result.items,
                totals=MealTotals.from_result(result),
            ),
        )
        if updated is None:
            raise MealNotFoundError(meal_id)
        return updated

    def delete_meal(self, user_id: str, meal_id: str) -> None:
        """Delete a meal owned by the user."""
        deleted = self._call_storage(
            "delete meal", lambda: self.repository.delete_meal(user_id, meal_id)
        )
        if not deleted:
            raise MealNotFoundError(meal_id)

    def list_today(self, user_id: str) -> list[Meal]:
        """Return today's meals, newest first."""
        today = self.today()
        meals = self._call_storage(
            "load meals",
            lambda: self.repository.list_meals_for_day(user_id, today),
        )
        return sorted(meals, key=lambda meal: meal.timestamp, reverse=True)

    def today(self) -> str:
        """Return the current day key."""
        return day_key(self.clock(), self.timezone_name)

    def _call_storage(self, action: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except Exception as exc:
            _logger.exception("Failed to %s", action)
            raise StorageError(f"Failed to {action}: {exc}") from exc


def _require_description(description: str) -> str:
    cleaned = (description or "").strip()
    if not cleaned:
        raise InvalidInputError("Meal description must not be empty")
    return cleaned
