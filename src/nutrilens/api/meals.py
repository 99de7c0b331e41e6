"""Food analysis and meal record endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from nutrilens.api.deps import get_container, require_user
from nutrilens.api.schemas import AnalyzeRequest, MealRecordOut
from nutrilens.containers import AppContainer
from nutrilens.domain.users import UserRecord
from nutrilens.domain.vision import FoodAnalysis
from nutrilens.services.vision import strip_data_url_prefix

router = APIRouter(prefix="/api", tags=["meals"])


@router.post("/analyze")
async def analyze(
    body: AnalyzeRequest, container: AppContainer = Depends(get_container)
) -> FoodAnalysis:
    """Estimate calories and macros for a meal photo without saving it."""
    base64_image = strip_data_url_prefix(body.image_data)
    return await container.vision_service.analyze(base64_image)


@router.get("/meals")
async def list_meals(
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> list[MealRecordOut]:
    """Return the caller's meal records, newest first."""
    records = container.meal_service.list_meals(user.id)
    return [MealRecordOut.from_record(record) for record in records]


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def create_meal(
    payload: dict[str, Any] = Body(...),
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> MealRecordOut:
    """Save an analyzed meal for the caller."""
    record = container.meal_service.create_meal(user.id, payload)
    return MealRecordOut.from_record(record)


@router.get("/meals/{meal_id}")
async def get_meal(
    meal_id: int,
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> MealRecordOut:
    """Return one of the caller's meal records."""
    record = container.meal_service.get_meal(user.id, meal_id)
    return MealRecordOut.from_record(record)
