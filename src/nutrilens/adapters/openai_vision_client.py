"""OpenAI Responses API client for meal photo analysis.

The model receives the analysis prompt and the meal photo in one user turn and
must answer with a single JSON object carrying `name`, `totalCalories`,
`confidenceScore` and an `items` list of food items with macros.
"""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrilens.services.vision import VisionClient


@dataclass
class OpenAIVisionClient(VisionClient):
    """Meal analysis client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create a client for the given OpenAI API key."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        max_output_tokens: int,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Ask the model to analyze the meal photo and return its JSON answer.

        The answer is constrained by the `food_analysis` JSON schema; it is
        parsed but not validated here.
        """
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "food_analysis",
                    "strict": True,
                    "schema": schema,
                }
            },
            "max_output_tokens": max_output_tokens,
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned no meal analysis")
        parsed = json.loads(output_text)
        if not isinstance(parsed, dict):
            raise ValueError("OpenAI meal analysis is not a JSON object")
        return parsed

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
