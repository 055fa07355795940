"""Models describing the outcome of a nutrition analysis."""

from dataclasses import dataclass
from enum import StrEnum

from meal_tracker.domain.nutrition import NutritionResult


class AnalysisSource(StrEnum):
    """Where a nutrition result came from."""

    AI = "ai"
    FALLBACK = "fallback"


class FaultReason(StrEnum):
    """Why a remote analysis did not produce a result."""

    MISSING_CREDENTIAL = "missing_credential"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"
    EMPTY_RESPONSE = "empty_response"
    INVALID_RESPONSE = "invalid_response"
    NO_JSON = "no_json"
    INVALID_JSON = "invalid_json"
    UNRECOGNIZED_SHAPE = "unrecognized_shape"
    EMPTY_ITEMS = "empty_items"


@dataclass(frozen=True)
class AnalysisFault:
    """A failed remote analysis."""

    reason: FaultReason
    detail: str = ""


@dataclass(frozen=True)
class AnalysisOutcome:
    """Final analysis result with its provenance."""

    result: NutritionResult
    source: AnalysisSource
    fault: AnalysisFault | None = None


@dataclass(frozen=True)
class CanonicalPayload:
    """Model output already shaped like a nutrition result."""

    items: list[object]


@dataclass(frozen=True)
class NutrientMapPayload:
    """Model output carrying a single nutrient map for the whole meal."""

    meal: str | None
    nutrients: dict[str, object]


@dataclass(frozen=True)
class UnrecognizedPayload:
    """Model output matching no known shape."""

    keys: list[str]


ModelPayload = CanonicalPayload | NutrientMapPayload | UnrecognizedPayload

RemoteAnalysis = NutritionResult | AnalysisFault
