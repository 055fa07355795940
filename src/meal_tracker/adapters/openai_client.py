"""OpenAI Responses API client for nutrition analysis."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from meal_tracker.domain.analysis import FaultReason
from meal_tracker.services.analysis import ModelClientError, NutritionModelClient


@dataclass
class OpenAINutritionClient(NutritionModelClient):
    """Nutrition model client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAINutritionClient":
        """Create an OpenAI nutrition client."""
        return cls(client=AsyncOpenAI(api_key=api_key, max_retries=0), model=model)

    async def generate(self, prompt: str) -> str:
        """Send the prompt and return the output text."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[{"role": "user", "content": prompt}],
                store=False,
            )
        except openai.APIStatusError as exc:
            raise ModelClientError(
                FaultReason.HTTP_ERROR, f"OpenAI API error: {exc.status_code}"
            ) from exc
        except openai.APIError as exc:
            raise ModelClientError(FaultReason.TRANSPORT_ERROR, str(exc)) from exc

        output_text = response.output_text
        if not output_text:
            raise ModelClientError(
                FaultReason.EMPTY_RESPONSE, "OpenAI returned an empty response"
            )
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
