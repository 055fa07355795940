"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_tracker.adapters.gemini_client import GeminiNutritionClient
from meal_tracker.adapters.openai_client import OpenAINutritionClient
from meal_tracker.adapters.supabase_identity_provider import SupabaseIdentityProvider
from meal_tracker.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from meal_tracker.config import Settings
from meal_tracker.services.analysis import NutritionAnalysisService
from meal_tracker.services.identity import IdentityProvider
from meal_tracker.services.meals import MealService
from meal_tracker.services.profiles import ProfileService
from meal_tracker.services.stats import DailySummaryService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_provider: IdentityProvider
    analysis_service: NutritionAnalysisService
    meal_service: MealService
    profile_service: ProfileService
    summary_service: DailySummaryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    model_client = _build_model_client(resolved_settings)
    analysis_service = NutritionAnalysisService(client=model_client)
    meal_service = MealService(
        analysis_service=analysis_service,
        repository=SupabaseMealRepository(supabase_client),
        timezone_name=resolved_settings.timezone,
    )
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    summary_service = DailySummaryService(
        meal_service=meal_service,
        profile_service=profile_service,
    )

    async def close_resources() -> None:
        if model_client is not None:
            await model_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=SupabaseIdentityProvider(supabase_client),
        analysis_service=analysis_service,
        meal_service=meal_service,
        profile_service=profile_service,
        summary_service=summary_service,
        close_resources=close_resources,
    )


def _build_model_client(
    settings: Settings,
) -> GeminiNutritionClient | OpenAINutritionClient | None:
    api_key = settings.ai_api_key()
    if api_key is None:
        _logger.info(
            "No %s API key configured, AI analysis disabled", settings.ai_provider
        )
        return None
    if settings.ai_provider == "openai":
        return OpenAINutritionClient.create(
            api_key=api_key, model=settings.openai_model
        )
    return GeminiNutritionClient.create(
        api_key=api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
    )
