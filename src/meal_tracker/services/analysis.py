"""Nutrition analysis backed by a language model with an offline fallback."""

import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from meal_tracker.domain.analysis import (
    AnalysisFault,
    AnalysisOutcome,
    AnalysisSource,
    CanonicalPayload,
    FaultReason,
    ModelPayload,
    NutrientMapPayload,
    RemoteAnalysis,
    UnrecognizedPayload,
)
from meal_tracker.domain.nutrition import FoodItem, NutritionResult
from meal_tracker.services.fallback import analyze_offline
from meal_tracker.services.normalizer import normalize

_logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

DEFAULT_MEAL_NAME = "Analyzed meal"
DEFAULT_ITEM_NAME = "Unnamed item"
DEFAULT_UNIT = "serving"

PROMPT_TEMPLATE = """Analyze the nutrition for this meal: "{description}"

Please provide a detailed breakdown with accurate nutrition information. \
Format your response as JSON with this exact structure:

{{
  "success": true,
  "items": [
    {{
      "name": "specific food item name",
      "quantity": number,
      "unit": "piece/cup/slice/etc",
      "calories": number,
      "protein": number,
      "carbs": number,
      "fats": number
    }}
  ],
  "totalCalories": total_number,
  "totalProtein": total_number,
  "totalCarbs": total_number,
  "totalFats": total_number
}}

Parse each food item separately (e.g., "2 eggs" and "1 slice toast" as separate \
items).
Use realistic USDA nutrition data.
Be accurate with quantities and calculations.
Return ONLY the JSON, no additional text."""


class ModelClientError(Exception):
    """Raised by model clients when a request does not yield text."""

    def __init__(self, reason: FaultReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class NutritionModelClient(Protocol):
    """Interface for text generation against a remote model."""

    async def generate(self, prompt: str) -> str:
        """Return the model's raw text answer for the prompt."""


@dataclass
class NutritionAnalysisService:
    """Turns meal descriptions into nutrition results.

    ``client`` is None when no credential is configured; every analysis then
    goes straight to the keyword fallback.
    """

    client: NutritionModelClient | None

    async def analyze(self, description: str) -> NutritionResult:
        """Return a nutrition result for the description; never raises."""
        outcome = await self.analyze_detailed(description)
        return outcome.result

    async def analyze_detailed(self, description: str) -> AnalysisOutcome:
        """Return the result together with its source and any fault."""
        remote = await self.analyze_remote(description)
        if isinstance(remote, NutritionResult):
            return AnalysisOutcome(result=remote, source=AnalysisSource.AI)

        if remote.reason == FaultReason.MISSING_CREDENTIAL:
            _logger.info("AI credential not configured, using offline analysis")
        else:
            _logger.warning(
                "AI analysis failed (%s): %s", remote.reason, remote.detail
            )
        return AnalysisOutcome(
            result=analyze_offline(description),
            source=AnalysisSource.FALLBACK,
            fault=remote,
        )

    async def analyze_remote(self, description: str) -> RemoteAnalysis:
        """Ask the model once and parse its answer, reporting faults as values."""
        if self.client is None:
            return AnalysisFault(FaultReason.MISSING_CREDENTIAL)
        try:
            text = await self.client.generate(build_prompt(description))
        except ModelClientError as exc:
            return AnalysisFault(exc.reason, str(exc))
        except Exception as exc:  # noqa: BLE001
            return AnalysisFault(FaultReason.TRANSPORT_ERROR, repr(exc))
        return parse_model_text(text, description)


def build_prompt(description: str) -> str:
    """Return the analysis prompt for a meal description."""
    return PROMPT_TEMPLATE.format(description=description.strip())


def parse_model_text(text: str, description: str = "") -> RemoteAnalysis:
    """Parse raw model text into a nutrition result or a fault."""
    if not text or not text.strip():
        return AnalysisFault(FaultReason.EMPTY_RESPONSE)

    cleaned = _FENCE_RE.sub("", text).strip()
    raw_json = extract_json_object(cleaned)
    if raw_json is None:
        return AnalysisFault(FaultReason.NO_JSON, cleaned[:200])
    try:
        parsed = json.loads(raw_json)
    except (ValueError, RecursionError) as exc:
        return AnalysisFault(FaultReason.INVALID_JSON, repr(exc)[:200])

    payload = classify_payload(parsed)
    if isinstance(payload, CanonicalPayload):
        items = [
            _coerce_item(raw) for raw in payload.items if isinstance(raw, Mapping)
        ]
        if not items:
            return AnalysisFault(FaultReason.EMPTY_ITEMS)
        return _normalize_finite(items)
    if isinstance(payload, NutrientMapPayload):
        return _normalize_finite([_nutrient_map_item(payload)])
    return AnalysisFault(
        FaultReason.UNRECOGNIZED_SHAPE, f"keys={','.join(payload.keys)}"
    )


def extract_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` block in text.

    Braces inside JSON string literals do not count towards nesting.
    """
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def classify_payload(parsed: object) -> ModelPayload:
    """Tag a parsed model answer with the shape it matches."""
    if not isinstance(parsed, Mapping):
        return UnrecognizedPayload(keys=[])
    items = parsed.get("items")
    if isinstance(items, list) and parsed.get("success") is not False:
        return CanonicalPayload(items=items)
    nutrients = parsed.get("nutrients")
    if isinstance(nutrients, Mapping) or "meal" in parsed:
        meal = parsed.get("meal")
        return NutrientMapPayload(
            meal=meal if isinstance(meal, str) and meal.strip() else None,
            nutrients=dict(nutrients) if isinstance(nutrients, Mapping) else {},
        )
    return UnrecognizedPayload(keys=sorted(str(key) for key in parsed))


def _normalize_finite(items: list[FoodItem]) -> RemoteAnalysis:
    for field_name in ("calories", "protein", "carbs", "fats"):
        total = sum(float(getattr(item, field_name)) for item in items)
        if not math.isfinite(total):
            return AnalysisFault(
                FaultReason.INVALID_RESPONSE, f"{field_name} total overflows"
            )
    return normalize(items)


def _coerce_item(raw: Mapping[str, object]) -> FoodItem:
    name = str(raw.get("name") or "").strip() or DEFAULT_ITEM_NAME
    quantity = _coerce_number(raw.get("quantity"))
    unit = str(raw.get("unit") or "").strip() or DEFAULT_UNIT
    return FoodItem(
        name=name,
        quantity=quantity if quantity > 0 else 1,
        unit=unit,
        calories=_coerce_number(raw.get("calories")),
        protein=_coerce_number(raw.get("protein")),
        carbs=_coerce_number(raw.get("carbs")),
        fats=_coerce_number(raw.get("fats")),
    )


def _nutrient_map_item(payload: NutrientMapPayload) -> FoodItem:
    nutrients = payload.nutrients
    return FoodItem(
        name=payload.meal or DEFAULT_MEAL_NAME,
        quantity=1,
        unit=DEFAULT_UNIT,
        calories=_nutrient_value(nutrients, "calories"),
        protein=_nutrient_value(nutrients, "protein"),
        carbs=_nutrient_value(nutrients, "carbohydrates", "carbs"),
        fats=_nutrient_value(nutrients, "fats", "fat"),
    )


def _nutrient_value(nutrients: Mapping[str, object], *keys: str) -> float:
    """Return the first present nutrient, unwrapping ``{"value": n}``."""
    for key in keys:
        value = nutrients.get(key)
        if isinstance(value, Mapping):
            value = value.get("value")
        if value is not None:
            return _coerce_number(value)
    return 0


def _coerce_number(value: object) -> float:
    """Coerce a model-provided number; missing, invalid or negative is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if not isinstance(value, str | int | float):
        return 0
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0
    if not math.isfinite(number) or number <= 0:
        return 0
    return int(number) if isinstance(value, int) else number
