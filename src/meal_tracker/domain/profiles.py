"""Domain models for users, profiles and goals."""

from dataclasses import dataclass, field
from enum import StrEnum


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "veryActive"


class WeightGoal(StrEnum):
    """Body weight direction the user is aiming for."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


@dataclass(frozen=True)
class Principal:
    """Signed-in identity provided by the auth service."""

    uid: str
    email: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class Goals:
    """Daily nutrition targets."""

    calories: float = 2000
    protein: float = 100
    carbs: float = 250
    fats: float = 70

    def to_dict(self) -> dict[str, float]:
        """Return the document representation."""
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


@dataclass(frozen=True)
class PersonalInfo:
    """Body metrics used to derive recommended goals."""

    age: float
    weight: float
    height: float
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: WeightGoal = WeightGoal.MAINTAIN

    def to_dict(self) -> dict[str, object]:
        """Return the document representation."""
        return {
            "age": self.age,
            "weight": self.weight,
            "height": self.height,
            "activityLevel": str(self.activity_level),
            "goal": str(self.goal),
        }


@dataclass(frozen=True)
class UserProfile:
    """Per-user profile document."""

    user_id: str
    email: str | None = None
    display_name: str | None = None
    goals: Goals = field(default_factory=Goals)
    personal_info: PersonalInfo | None = None
