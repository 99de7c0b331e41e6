"""Domain models for meal records."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import ConfigDict, Field

from nutrilens.domain.vision import CamelModel, FoodItem


@dataclass(frozen=True)
class MealRecord:
    """Persisted analysis result owned by a user."""

    id: int
    user_id: int | None
    name: str
    image_data: str
    total_calories: int
    confidence_score: int
    timestamp: datetime
    food_items: list[FoodItem]


class MealRecordInput(CamelModel):
    """Validated payload for creating a meal record."""

    model_config = ConfigDict(extra="ignore")

    user_id: int
    name: str = Field(min_length=1)
    image_data: str = Field(min_length=1)
    total_calories: int = Field(ge=0)
    confidence_score: int = Field(ge=0, le=100)
    food_items: list[FoodItem]
