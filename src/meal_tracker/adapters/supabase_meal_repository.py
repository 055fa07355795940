"""Supabase repository for meals."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from meal_tracker.domain.meals import Meal, MealTotals
from meal_tracker.domain.nutrition import FoodItem
from meal_tracker.services.meals import MealRepository

_MEAL_COLUMNS = "id, user_id, description, items, totals, timestamp, date, updated_at"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal documents."""

    client: Client

    def create_meal(  # noqa: PLR0913
        self,
        user_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
        timestamp: datetime,
        day: str,
    ) -> Meal:
        """Insert a meal row and return it."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": user_id,
                    "description": description,
                    "items": [item.to_dict() for item in items],
                    "totals": totals.to_dict(),
                    "timestamp": timestamp.isoformat(),
                    "date": day,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def replace_meal(
        self,
        user_id: str,
        meal_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
    ) -> Meal | None:
        """Overwrite description, items and totals of a meal."""
        response = (
            self.client.table("meals")
            .update(
                {
                    "description": description,
                    "items": [item.to_dict() for item in items],
                    "totals": totals.to_dict(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", meal_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        """Delete a meal row."""
        response = (
            self.client.table("meals")
            .delete()
            .eq("id", meal_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(response.data)

    def list_meals_for_day(self, user_id: str, day: str) -> list[Meal]:
        """Return meals for a day, newest first."""
        response = (
            self.client.table("meals")
            .select(_MEAL_COLUMNS)
            .eq("user_id", user_id)
            .eq("date", day)
            .order("timestamp", desc=True)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]


def _parse_meal(row: dict[str, object]) -> Meal:
    raw_items = row.get("items")
    items = [
        _parse_item(item)
        for item in (raw_items if isinstance(raw_items, list) else [])
        if isinstance(item, Mapping)
    ]
    return Meal(
        id=str(row["id"]),
        user_id=str(row.get("user_id", "")),
        description=str(row.get("description", "")),
        items=items,
        totals=MealTotals.from_document(row),
        timestamp=_parse_datetime(row.get("timestamp")) or datetime.min.replace(
            tzinfo=UTC
        ),
        date=str(row.get("date", "")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _parse_item(raw: Mapping[str, object]) -> FoodItem:
    return FoodItem(
        name=str(raw.get("name", "")),
        quantity=float(raw.get("quantity") or 1),
        unit=str(raw.get("unit") or "serving"),
        calories=float(raw.get("calories") or 0.0),
        protein=float(raw.get("protein") or 0.0),
        carbs=float(raw.get("carbs") or 0.0),
        fats=float(raw.get("fats") or 0.0),
    )


def _parse_datetime(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
