"""Authorization policies applied by request handlers."""

from nutrilens.domain.meals import MealRecord
from nutrilens.errors import forbidden_error


def ensure_can_read_meal(user_id: int, record: MealRecord) -> None:
    """Raise a forbidden error unless the user owns the meal record.

    Records without an owner predate accounts and are readable by nobody.
    """
    if record.user_id is None or record.user_id != user_id:
        raise forbidden_error("You do not have access to this meal record")


def assign_meal_owner(payload: dict[str, object], user_id: int) -> dict[str, object]:
    """Return the payload with its owner forced to the authenticated user."""
    merged = {
        key: value for key, value in payload.items() if key not in {"userId", "user_id"}
    }
    merged["userId"] = user_id
    return merged
