"""User profile and goal management."""

import logging
from dataclasses import dataclass
from typing import Protocol

from meal_tracker.domain.profiles import (
    ActivityLevel,
    Goals,
    PersonalInfo,
    Principal,
    UserProfile,
    WeightGoal,
)
from meal_tracker.errors import InvalidInputError, StorageError

_logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

GOAL_ADJUSTMENTS: dict[WeightGoal, float] = {
    WeightGoal.LOSE: -500,
    WeightGoal.MAINTAIN: 0,
    WeightGoal.GAIN: 500,
}


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the stored profile, if any."""

    def upsert_profile(self, profile: UserProfile) -> None:
        """Create or update the profile document."""


@dataclass
class ProfileService:
    """Reads and updates profiles and nutrition goals."""

    repository: ProfileRepository

    def get_profile(self, principal: Principal) -> UserProfile:
        """Return the user's profile, falling back to defaults."""
        try:
            stored = self.repository.get_profile(principal.uid)
        except Exception as exc:
            _logger.exception("Failed to load profile")
            raise StorageError(f"Failed to load profile: {exc}") from exc
        if stored is not None:
            return stored
        return UserProfile(
            user_id=principal.uid,
            email=principal.email,
            display_name=principal.display_name,
        )

    def get_goals(self, principal: Principal) -> Goals:
        """Return the user's goals or the defaults."""
        return self.get_profile(principal).goals

    def save_profile(
        self,
        principal: Principal,
        display_name: str | None,
        goals: Goals,
        personal_info: PersonalInfo | None,
    ) -> UserProfile:
        """Validate and persist the editable profile fields."""
        _validate_goals(goals)
        if personal_info is not None:
            _validate_personal_info(personal_info)
        profile = UserProfile(
            user_id=principal.uid,
            email=principal.email,
            display_name=(display_name or "").strip() or principal.display_name,
            goals=goals,
            personal_info=personal_info,
        )
        try:
            self.repository.upsert_profile(profile)
        except Exception as exc:
            _logger.exception("Failed to save profile")
            raise StorageError(f"Failed to update profile: {exc}") from exc
        return profile


def recommend_goals(personal_info: PersonalInfo) -> Goals:
    """Derive goals with the Mifflin-St Jeor equation.

    Uses the male constant (+5). Macros split the target calories 25% protein,
    45% carbs and 30% fat.
    """
    _validate_personal_info(personal_info)
    bmr = (
        10 * personal_info.weight
        + 6.25 * personal_info.height
        - 5 * personal_info.age
        + 5
    )
    tdee = bmr * ACTIVITY_MULTIPLIERS[personal_info.activity_level]
    target = tdee + GOAL_ADJUSTMENTS[personal_info.goal]
    return Goals(
        calories=round(target),
        protein=round(target * 0.25 / 4),
        carbs=round(target * 0.45 / 4),
        fats=round(target * 0.30 / 9),
    )


def _validate_goals(goals: Goals) -> None:
    for name, value in goals.to_dict().items():
        if value <= 0:
            raise InvalidInputError(f"Goal {name} must be positive")


def _validate_personal_info(personal_info: PersonalInfo) -> None:
    for name in ("age", "weight", "height"):
        if getattr(personal_info, name) <= 0:
            raise InvalidInputError(f"Please fill in a positive {name}")
