"""Supabase repository for meal records."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from nutrilens.domain.meals import MealRecord
from nutrilens.domain.vision import FoodItem
from nutrilens.services.meals import MealRecordRepository

_COLUMNS = (
    "id, user_id, name, image_data, total_calories, confidence_score, "
    "timestamp, food_items"
)


@dataclass
class SupabaseMealRecordRepository(MealRecordRepository):
    """Supabase implementation for meal records."""

    client: Client

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
        """Insert a meal record; id and timestamp come from the database."""
        response = (
            self.client.table("meal_records")
            .insert(
                {
                    "user_id": user_id,
                    "name": name,
                    "image_data": image_data,
                    "total_calories": total_calories,
                    "confidence_score": confidence_score,
                    "food_items": [
                        item.model_dump(by_alias=True) for item in food_items
                    ],
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal record")
        return _parse_record(response.data[0])

    def get_meal_record(self, meal_id: int) -> MealRecord | None:
        """Return a meal record by id."""
        response = (
            self.client.table("meal_records")
            .select(_COLUMNS)
            .eq("id", meal_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_record(response.data[0])

    def list_meal_records_for_user(self, user_id: int) -> list[MealRecord]:
        """Return a user's meal records, newest first."""
        response = (
            self.client.table("meal_records")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("timestamp", desc=True)
            .execute()
        )
        return [_parse_record(row) for row in response.data or []]


def _parse_record(row: dict[str, object]) -> MealRecord:
    user_id = row.get("user_id")
    return MealRecord(
        id=int(row["id"]),
        user_id=int(user_id) if user_id is not None else None,
        name=str(row.get("name", "")),
        image_data=str(row.get("image_data") or ""),
        total_calories=int(row.get("total_calories", 0)),
        confidence_score=int(row.get("confidence_score") or 0),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
        food_items=[
            FoodItem.model_validate(item) for item in row.get("food_items") or []
        ],
    )
