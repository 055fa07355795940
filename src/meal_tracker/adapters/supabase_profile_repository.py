"""Supabase repository for user profiles."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from meal_tracker.domain.profiles import (
    ActivityLevel,
    Goals,
    PersonalInfo,
    UserProfile,
    WeightGoal,
)
from meal_tracker.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile documents."""

    client: Client

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the stored profile for a user."""
        response = (
            self.client.table("profiles")
            .select("user_id, email, display_name, goals, personal_info")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def upsert_profile(self, profile: UserProfile) -> None:
        """Create the profile or merge the editable fields."""
        self.client.table("profiles").upsert(
            {
                "user_id": profile.user_id,
                "email": profile.email,
                "display_name": profile.display_name,
                "goals": profile.goals.to_dict(),
                "personal_info": (
                    profile.personal_info.to_dict() if profile.personal_info else None
                ),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        user_id=str(row["user_id"]),
        email=row.get("email"),
        display_name=row.get("display_name"),
        goals=_parse_goals(row.get("goals")),
        personal_info=_parse_personal_info(row.get("personal_info")),
    )


def _parse_goals(raw: object) -> Goals:
    if not isinstance(raw, Mapping):
        return Goals()
    defaults = Goals()
    return Goals(
        calories=float(raw.get("calories") or defaults.calories),
        protein=float(raw.get("protein") or defaults.protein),
        carbs=float(raw.get("carbs") or defaults.carbs),
        fats=float(raw.get("fats") or defaults.fats),
    )


def _parse_personal_info(raw: object) -> PersonalInfo | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return PersonalInfo(
            age=float(raw["age"]),
            weight=float(raw["weight"]),
            height=float(raw["height"]),
            activity_level=ActivityLevel(raw.get("activityLevel", "moderate")),
            goal=WeightGoal(raw.get("goal", "maintain")),
        )
    except (KeyError, TypeError, ValueError):
        return None
