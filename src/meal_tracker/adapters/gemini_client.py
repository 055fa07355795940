"""Google Gemini generateContent client."""

from dataclasses import dataclass

import httpx

from meal_tracker.domain.analysis import FaultReason
from meal_tracker.services.analysis import ModelClientError, NutritionModelClient

GENERATION_CONFIG: dict[str, object] = {
    "temperature": 0.1,
    "topK": 1,
    "topP": 1,
    "maxOutputTokens": 2048,
}


@dataclass
class GeminiNutritionClient(NutritionModelClient):
    """HTTPX-backed Gemini client returning the first candidate's text."""

    api_key: str
    model: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, model: str, base_url: str) -> "GeminiNutritionClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url,
            http_client=httpx.AsyncClient(timeout=None),
        )

    async def generate(self, prompt: str) -> str:
        """POST the prompt to generateContent and return the answer text."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self.http_client.post(
                url,
                params={"key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": prompt}]}],
                    "generationConfig": GENERATION_CONFIG,
                },
            )
        except httpx.HTTPError as exc:
            raise ModelClientError(FaultReason.TRANSPORT_ERROR, repr(exc)) from exc

        if not response.is_success:
            raise ModelClientError(
                FaultReason.HTTP_ERROR,
                f"Gemini API error: {response.status_code} {response.text[:200]}",
            )
        if not response.content:
            raise ModelClientError(FaultReason.EMPTY_RESPONSE, "Empty Gemini response")
        try:
            data = response.json()
        except ValueError as exc:
            raise ModelClientError(
                FaultReason.INVALID_RESPONSE, "Gemini response is not JSON"
            ) from exc
        return _candidate_text(data)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _candidate_text(data: object) -> str:
    try:
        candidate = data["candidates"][0]  # type: ignore[index]
        text = candidate["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ModelClientError(
            FaultReason.INVALID_RESPONSE, "Invalid response format from Gemini API"
        ) from exc
    if not isinstance(text, str) or not text.strip():
        raise ModelClientError(FaultReason.EMPTY_RESPONSE, "Gemini returned no text")
    return text
