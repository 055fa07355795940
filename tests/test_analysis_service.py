"""Tests for AI nutrition analysis and its fallback routing."""

import asyncio
import json

import pytest

from meal_tracker.domain.analysis import (
    AnalysisFault,
    AnalysisSource,
    CanonicalPayload,
    FaultReason,
    NutrientMapPayload,
    UnrecognizedPayload,
)
from meal_tracker.domain.nutrition import NutritionResult
from meal_tracker.services.analysis import (
    ModelClientError,
    NutritionAnalysisService,
    build_prompt,
    classify_payload,
    extract_json_object,
    parse_model_text,
)
from meal_tracker.services.fallback import analyze_offline
from tests.conftest import FakeModelClient

NUTRIENT_MAP_ANSWER = json.dumps(
    {
        "meal": "Burrito bowl",
        "nutrients": {
            "calories": {"value": 400},
            "protein": {"value": 20},
            "carbohydrates": {"value": 50},
            "fats": {"value": 10},
        },
    }
)


def test_canonical_answer_is_normalized(model_client: FakeModelClient) -> None:
    service = NutritionAnalysisService(client=model_client)

    outcome = asyncio.run(service.analyze_detailed("2 eggs and toast"))

    assert outcome.source == AnalysisSource.AI
    assert outcome.fault is None
    result = outcome.result
    assert [item.name for item in result.items] == ["egg", "toast"]
    # stale totals from the model are recomputed from the items
    assert result.total_calories == 218
    assert result.total_protein == 15.2
    assert result.total_carbs == 14.5
    assert result.total_fats == 10.5


def test_prompt_requests_itemized_json(model_client: FakeModelClient) -> None:
    service = NutritionAnalysisService(client=model_client)

    asyncio.run(service.analyze("  oatmeal with banana  "))

    prompt = model_client.prompts[0]
    assert '"oatmeal with banana"' in prompt
    assert '"items"' in prompt
    assert "totalCalories" in prompt
    assert "USDA" in prompt
    assert prompt == build_prompt("oatmeal with banana")


def test_nutrient_map_answer_becomes_single_item() -> None:
    service = NutritionAnalysisService(
        client=FakeModelClient(answer=NUTRIENT_MAP_ANSWER)
    )

    result = asyncio.run(service.analyze("burrito bowl"))

    assert len(result.items) == 1
    item = result.items[0]
    assert item.name == "Burrito bowl"
    assert item.quantity == 1
    assert item.unit == "serving"
    assert result.total_calories == 400
    assert result.total_protein == 20
    assert result.total_carbs == 50
    assert result.total_fats == 10


def test_nutrient_map_accepts_alternate_keys_and_bare_numbers() -> None:
    answer = json.dumps({"nutrients": {"calories": 300, "carbs": 30, "fat": 12}})

    result = parse_model_text(answer)

    assert isinstance(result, NutritionResult)
    item = result.items[0]
    assert item.name == "Analyzed meal"
    assert (item.calories, item.protein, item.carbs, item.fats) == (300, 0, 30, 12)


@pytest.mark.parametrize(
    ("client", "reason"),
    [
        (
            FakeModelClient(
                error=ModelClientError(FaultReason.HTTP_ERROR, "500 Internal")
            ),
            FaultReason.HTTP_ERROR,
        ),
        (FakeModelClient(error=RuntimeError("boom")), FaultReason.TRANSPORT_ERROR),
        (FakeModelClient(answer="{not valid json}"), FaultReason.INVALID_JSON),
        (FakeModelClient(answer="Sorry, I can't help."), FaultReason.NO_JSON),
        (FakeModelClient(answer='{"foo": 1}'), FaultReason.UNRECOGNIZED_SHAPE),
        (FakeModelClient(answer='{"items": []}'), FaultReason.EMPTY_ITEMS),
        (FakeModelClient(answer="   "), FaultReason.EMPTY_RESPONSE),
        (
            FakeModelClient(answer='{"items": ' + "[" * 100_000 + "]" * 100_000 + "}"),
            FaultReason.INVALID_JSON,
        ),
        (
            FakeModelClient(
                answer=json.dumps(
                    {"items": [{"calories": 1e308}, {"calories": 1e308}]}
                )
            ),
            FaultReason.INVALID_RESPONSE,
        ),
    ],
)
def test_faults_fall_back_to_offline_analysis(
    client: FakeModelClient, reason: FaultReason
) -> None:
    service = NutritionAnalysisService(client=client)

    outcome = asyncio.run(service.analyze_detailed("2 eggs"))

    assert outcome.source == AnalysisSource.FALLBACK
    assert outcome.fault is not None
    assert outcome.fault.reason == reason
    assert outcome.result == analyze_offline("2 eggs")


def test_missing_client_skips_remote_call() -> None:
    service = NutritionAnalysisService(client=None)

    remote = asyncio.run(service.analyze_remote("3 bananas"))
    result = asyncio.run(service.analyze("3 bananas"))

    assert isinstance(remote, AnalysisFault)
    assert remote.reason == FaultReason.MISSING_CREDENTIAL
    assert result == analyze_offline("3 bananas")


def test_canonical_items_are_coerced() -> None:
    answer = json.dumps(
        {
            "items": [
                {
                    "name": "",
                    "quantity": 0,
                    "calories": "120",
                    "protein": -4,
                    "carbs": None,
                },
                "not an item",
            ]
        }
    )

    result = parse_model_text(answer)

    assert isinstance(result, NutritionResult)
    assert len(result.items) == 1
    item = result.items[0]
    assert item.name == "Unnamed item"
    assert item.quantity == 1
    assert item.unit == "serving"
    assert (item.calories, item.protein, item.carbs, item.fats) == (120, 0, 0, 0)


def test_answer_wrapped_in_prose() -> None:
    answer = (
        "Here is the breakdown you asked for:\n"
        '{"items": [{"name": "apple {green}", "calories": 95, "protein": 0.5,'
        ' "carbs": 25, "fats": 0.3}]}\n'
        "Let me know if you need {anything} else."
    )

    result = parse_model_text(answer)

    assert isinstance(result, NutritionResult)
    assert result.items[0].name == "apple {green}"
    assert result.total_calories == 95


def test_extract_json_object_uses_brace_matching() -> None:
    text = 'prefix {"a": {"b": "}"}, "c": 1} trailing {"d": 2}'

    assert extract_json_object(text) == '{"a": {"b": "}"}, "c": 1}'
    assert extract_json_object("no braces here") is None
    assert extract_json_object('{"unterminated": 1') is None


def test_classify_payload_variants() -> None:
    assert isinstance(classify_payload({"items": []}), CanonicalPayload)
    assert isinstance(classify_payload({"meal": "soup"}), NutrientMapPayload)
    assert isinstance(
        classify_payload({"success": False, "items": []}), UnrecognizedPayload
    )
    unrecognized = classify_payload({"b": 1, "a": 2})
    assert isinstance(unrecognized, UnrecognizedPayload)
    assert unrecognized.keys == ["a", "b"]
    assert isinstance(classify_payload([1, 2]), UnrecognizedPayload)


def test_out_of_range_numbers_are_zeroed() -> None:
    answer = (
        '{"items": [{"name": "mystery", "calories": 1' + "0" * 400 + ","
        ' "protein": "1e999", "carbs": 12, "fats": 3.5}]}'
    )
    service = NutritionAnalysisService(client=FakeModelClient(answer=answer))

    outcome = asyncio.run(service.analyze_detailed("mystery"))

    assert outcome.source == AnalysisSource.AI
    item = outcome.result.items[0]
    assert (item.calories, item.protein, item.carbs, item.fats) == (0, 0, 12, 3.5)
