"""Food analysis service backed by a hosted vision model."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrilens.domain.vision import FoodAnalysis
from nutrilens.errors import upstream_error

logger = logging.getLogger(__name__)

DATA_URL_MARKER = "base64,"

ANALYSIS_PROMPT = """
Analyze this food image and provide detailed nutritional information.
Identify all distinct food items in the image.
For each item, provide:
1. Name
2. Brief description
3. Estimated serving size
4. Estimated calories
5. Macronutrients (protein, carbs, fat) in grams

Also provide:
- Total calories for the entire meal
- Confidence score (0-100) for your analysis

Format your response as a JSON object with this structure:
{
  "name": "Meal name (breakfast/lunch/dinner/snack based on the food)",
  "totalCalories": number,
  "confidenceScore": number,
  "items": [
    {
      "name": "Food item name",
      "description": "Brief description",
      "servingSize": "Estimated serving size",
      "calories": number,
      "macros": {"protein": "Xg", "carbs": "Xg", "fat": "Xg"}
    }
  ]
}
""".strip()

_MACROS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "protein": {"type": "string"},
        "carbs": {"type": "string"},
        "fat": {"type": "string"},
    },
    "required": ["protein", "carbs", "fat"],
    "additionalProperties": False,
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "totalCalories": {"type": "integer"},
        "confidenceScore": {"type": "integer"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "servingSize": {"type": "string"},
                    "calories": {"type": "integer"},
                    "macros": _MACROS_SCHEMA,
                },
                "required": ["name", "description", "servingSize", "calories", "macros"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["name", "totalCalories", "confidenceScore", "items"],
    "additionalProperties": False,
}


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

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
        """Return the model's JSON answer for the image."""


@dataclass
class VisionService:
    """Service that sends meal photos to the vision model and types the answer."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool
    max_output_tokens: int = 1000

    async def analyze(self, base64_image: str) -> FoodAnalysis:
        """Analyze a base64 image (without data URL prefix)."""
        try:
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                max_output_tokens=self.max_output_tokens,
                image_data_url=_to_data_url(base64_image),
                schema=ANALYSIS_SCHEMA,
                prompt=ANALYSIS_PROMPT,
            )
            return FoodAnalysis.model_validate(raw)
        except Exception as exc:
            logger.exception("Food image analysis failed")
            raise upstream_error(
                "Error analyzing food image", f"Failed to analyze food image: {exc}"
            ) from exc


def strip_data_url_prefix(image_data: str) -> str:
    """Drop a leading "data:...;base64," prefix if present."""
    if DATA_URL_MARKER in image_data:
        return image_data.split(DATA_URL_MARKER, maxsplit=1)[1]
    return image_data


def _to_data_url(base64_image: str) -> str:
    """Wrap base64 image data in a data URL for image input."""
    mime_type = _detect_mime_type(base64_image)
    return f"data:{mime_type};base64,{base64_image}"


def _detect_mime_type(base64_image: str) -> str:
    """Infer a basic image MIME type from the encoded file signature."""
    try:
        header = base64.b64decode(base64_image[:16])
    except (binascii.Error, ValueError):
        return "image/jpeg"
    if header.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if header.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
