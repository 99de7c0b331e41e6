"""Meal record business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrilens.domain.meals import MealRecord, MealRecordInput
from nutrilens.domain.vision import FoodItem
from nutrilens.errors import format_validation_errors, not_found_error, validation_error
from nutrilens.services.policies import assign_meal_owner, ensure_can_read_meal

logger = logging.getLogger(__name__)


class MealRecordRepository(Protocol):
    """Persistence interface for meal records."""

    def create_meal_record(  # noqa: PLR0913
        self,
        *,
        user_id: int,
        name: str,
        image_data: str,
        total_calories: int,
        confidence_score: int,
        food_items: list[FoodItem],
    ) -> MealRecord:
        """Insert a meal record and return it with its id and timestamp."""

    def get_meal_record(self, meal_id: int) -> MealRecord | None:
        """Return a meal record by id, regardless of owner."""

    def list_meal_records_for_user(self, user_id: int) -> list[MealRecord]:
        """Return a user's meal records, newest first."""


@dataclass
class MealService:
    """Application service for saving and reading meal records."""

    repository: MealRecordRepository

    def create_meal(self, user_id: int, payload: dict[str, object]) -> MealRecord:
        """Validate a client payload and persist it for the user."""
        try:
            data = MealRecordInput.model_validate(assign_meal_owner(payload, user_id))
        except ValidationError as exc:
            raise validation_error(format_validation_errors(exc.errors())) from exc
        record = self.repository.create_meal_record(
            user_id=data.user_id,
            name=data.name,
            image_data=data.image_data,
            total_calories=data.total_calories,
            confidence_score=data.confidence_score,
            food_items=data.food_items,
        )
        logger.info("Meal record saved", extra={"meal_id": record.id})
        return record

    def list_meals(self, user_id: int) -> list[MealRecord]:
        """Return the user's meal records, newest first."""
        return self.repository.list_meal_records_for_user(user_id)

    def get_meal(self, user_id: int, meal_id: int) -> MealRecord:
        """Return a meal record the user owns."""
        record = self.repository.get_meal_record(meal_id)
        if record is None:
            raise not_found_error("Meal record not found")
        ensure_can_read_meal(user_id, record)
        return record
