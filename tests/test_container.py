"""Tests for container wiring."""

import asyncio

from meal_tracker.adapters.gemini_client import GeminiNutritionClient
from meal_tracker.adapters.openai_client import OpenAINutritionClient
from meal_tracker.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.summary_service.meal_service is container.meal_service
    assert isinstance(container.analysis_service.client, GeminiNutritionClient)
    asyncio.run(container.close_resources())


def test_build_container_selects_openai(settings) -> None:
    openai_settings = settings.model_copy(
        update={"ai_provider": "openai", "openai_api_key": "openai-key"}
    )

    container = build_container(openai_settings)

    assert isinstance(container.analysis_service.client, OpenAINutritionClient)
    asyncio.run(container.close_resources())


def test_placeholder_key_disables_ai(settings) -> None:
    placeholder = settings.model_copy(
        update={"gemini_api_key": "your_gemini_api_key_here"}
    )

    container = build_container(placeholder)

    assert container.analysis_service.client is None
    asyncio.run(container.close_resources())
