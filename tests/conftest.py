"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from meal_tracker.config import Settings
from meal_tracker.containers import AppContainer
from meal_tracker.domain.meals import Meal, MealTotals
from meal_tracker.domain.nutrition import FoodItem
from meal_tracker.domain.profiles import Principal, UserProfile
from meal_tracker.services.analysis import (
    NutritionAnalysisService,
    NutritionModelClient,
)
from meal_tracker.services.identity import IdentityProvider
from meal_tracker.services.meals import MealRepository, MealService
from meal_tracker.services.profiles import ProfileRepository, ProfileService
from meal_tracker.services.stats import DailySummaryService

FIXED_NOW = datetime(2026, 10, 19, 12, 30, tzinfo=UTC)

CANONICAL_ANSWER = """```json
{
  "success": true,
  "items": [
    {"name": "egg", "quantity": 2, "unit": "piece", "calories": 143,
     "protein": 12.6, "carbs": 0.7, "fats": 9.5},
    {"name": "toast", "quantity": 1, "unit": "slice", "calories": 75,
     "protein": 2.6, "carbs": 13.8, "fats": 1}
  ],
  "totalCalories": 999,
  "totalProtein": 15.2,
  "totalCarbs": 14.5,
  "totalFats": 10.5
}
```"""


@dataclass
class FakeModelClient(NutritionModelClient):
    """Fake model client returning a fixed answer or raising."""

    answer: str = CANONICAL_ANSWER
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[str, Meal] = field(default_factory=dict)
    error: Exception | None = None

    def create_meal(  # noqa: PLR0913
        self,
        user_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
        timestamp: datetime,
        day: str,
    ) -> Meal:
        self._maybe_fail()
        meal = Meal(
            id=str(uuid4()),
            user_id=user_id,
            description=description,
            items=items,
            totals=totals,
            timestamp=timestamp,
            date=day,
        )
        self.meals[meal.id] = meal
        return meal

    def replace_meal(
        self,
        user_id: str,
        meal_id: str,
        description: str,
        items: list[FoodItem],
        totals: MealTotals,
    ) -> Meal | None:
        self._maybe_fail()
        current = self.meals.get(meal_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(
            current,
            description=description,
            items=items,
            totals=totals,
            updated_at=datetime.now(tz=UTC),
        )
        self.meals[meal_id] = updated
        return updated

    def delete_meal(self, user_id: str, meal_id: str) -> bool:
        self._maybe_fail()
        current = self.meals.get(meal_id)
        if current is None or current.user_id != user_id:
            return False
        del self.meals[meal_id]
        return True

    def list_meals_for_day(self, user_id: str, day: str) -> list[Meal]:
        self._maybe_fail()
        return [
            meal
            for meal in self.meals.values()
            if meal.user_id == user_id and meal.date == day
        ]

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)

    def get_profile(self, user_id: str) -> UserProfile | None:
        return self.profiles.get(user_id)

    def upsert_profile(self, profile: UserProfile) -> None:
        self.profiles[profile.user_id] = profile


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider accepting a fixed set of tokens."""

    principals: dict[str, Principal] = field(default_factory=dict)

    def verify_token(self, access_token: str) -> Principal | None:
        return self.principals.get(access_token)


def make_analysis_service(
    client: NutritionModelClient | None = None,
) -> NutritionAnalysisService:
    return NutritionAnalysisService(client=client)


def make_meal_service(
    repository: InMemoryMealRepository | None = None,
    client: NutritionModelClient | None = None,
) -> MealService:
    return MealService(
        analysis_service=make_analysis_service(client),
        repository=repository or InMemoryMealRepository(),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def principal() -> Principal:
    return Principal(uid="user-1", email="ada@example.com", display_name="Ada")


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def container(
    settings: Settings,
    principal: Principal,
    model_client: FakeModelClient,
    meal_repository: InMemoryMealRepository,
    profile_repository: InMemoryProfileRepository,
) -> AppContainer:
    analysis_service = make_analysis_service(model_client)
    meal_service = MealService(
        analysis_service=analysis_service,
        repository=meal_repository,
        clock=lambda: FIXED_NOW,
    )
    profile_service = ProfileService(profile_repository)
    summary_service = DailySummaryService(
        meal_service=meal_service,
        profile_service=profile_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_provider=FakeIdentityProvider({"valid-token": principal}),
        analysis_service=analysis_service,
        meal_service=meal_service,
        profile_service=profile_service,
        summary_service=summary_service,
        close_resources=close_resources,
    )
