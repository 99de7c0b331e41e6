"""Models for food analysis results."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_GRAMS_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:g|grams?)?$", re.IGNORECASE)


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON with clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Macros(CamelModel):
    """Macronutrients of a food item, each stored as a grams label like "20g"."""

    protein: str
    carbs: str
    fat: str

    @field_validator("protein", "carbs", "fat", mode="before")
    @classmethod
    def normalize_grams(cls, value: object) -> str:
        return format_grams(parse_grams(value))


class FoodItem(CamelModel):
    """Single food item detected in a meal."""

    name: str
    description: str = ""
    serving_size: str = ""
    calories: int = Field(ge=0)
    macros: Macros


class AnalyzedMacros(CamelModel):
    """Macronutrients as the vision model reported them.

    Readable quantities are normalized to "20g"; anything else, such as a
    trace amount like "<1g", is kept verbatim.
    """

    protein: str
    carbs: str
    fat: str

    @field_validator("protein", "carbs", "fat", mode="before")
    @classmethod
    def normalize_readable_grams(cls, value: object) -> str:
        try:
            return format_grams(parse_grams(value))
        except ValueError:
            return value if isinstance(value, str) else str(value)


class AnalyzedFoodItem(CamelModel):
    """Food item exactly as the vision model described it."""

    name: str
    description: str = ""
    serving_size: str = ""
    calories: int
    macros: AnalyzedMacros


class FoodAnalysis(CamelModel):
    """Structured result of analyzing a meal photo.

    Passed through to the client as the model produced it; value ranges are
    only enforced once a meal is saved.
    """

    name: str
    total_calories: int
    confidence_score: int
    items: list[AnalyzedFoodItem]


def parse_grams(value: object) -> float:
    """Parse a macro quantity given as a number or a grams label."""
    if isinstance(value, bool):
        raise ValueError("macro must be a number of grams")
    if isinstance(value, int | float):
        if value < 0:
            raise ValueError("macro must not be negative")
        return float(value)
    if isinstance(value, str):
        match = _GRAMS_PATTERN.match(value.strip())
        if match:
            return float(match.group(1))
    raise ValueError(f"invalid macro quantity: {value!r}")


def format_grams(grams: float) -> str:
    """Format grams as the canonical label, e.g. 20.0 -> "20g"."""
    if grams.is_integer():
        return f"{int(grams)}g"
    return f"{round(grams, 2)}g"
