"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field

from meal_tracker.domain.profiles import (
    ActivityLevel,
    Goals,
    PersonalInfo,
    WeightGoal,
)


class MealDescriptionRequest(BaseModel):
    """Free-text description of a meal."""

    description: str = Field(max_length=2000)


class GoalsPayload(BaseModel):
    """Daily nutrition targets."""

    calories: float = Field(gt=0)
    protein: float = Field(gt=0)
    carbs: float = Field(gt=0)
    fats: float = Field(gt=0)

    def to_domain(self) -> Goals:
        """Convert to the domain model."""
        return Goals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


class PersonalInfoPayload(BaseModel):
    """Body metrics used for goal recommendations."""

    model_config = ConfigDict(populate_by_name=True)

    age: float = Field(gt=0)
    weight: float = Field(gt=0)
    height: float = Field(gt=0)
    activity_level: ActivityLevel = Field(
        default=ActivityLevel.MODERATE, alias="activityLevel"
    )
    goal: WeightGoal = WeightGoal.MAINTAIN

    def to_domain(self) -> PersonalInfo:
        """Convert to the domain model."""
        return PersonalInfo(
            age=self.age,
            weight=self.weight,
            height=self.height,
            activity_level=self.activity_level,
            goal=self.goal,
        )


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: str | None = Field(default=None, alias="displayName")
    goals: GoalsPayload
    personal_info: PersonalInfoPayload | None = Field(
        default=None, alias="personalInfo"
    )
