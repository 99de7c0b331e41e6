"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrilens.adapters.openai_vision_client import OpenAIVisionClient
from nutrilens.adapters.stripe_billing_client import StripeBillingClient
from nutrilens.adapters.supabase_meal_record_repository import (
    SupabaseMealRecordRepository,
)
from nutrilens.adapters.supabase_user_repository import SupabaseUserRepository
from nutrilens.config import Settings
from nutrilens.services.billing import BillingService
from nutrilens.services.meals import MealService
from nutrilens.services.users import UserService
from nutrilens.services.vision import VisionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    meal_service: MealService
    vision_service: VisionService
    billing_service: BillingService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    meal_repository = SupabaseMealRecordRepository(supabase_client)
    openai_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    vision_service = VisionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
    )
    billing_client = StripeBillingClient.create(
        api_key=resolved_settings.stripe_secret_key,
        webhook_secret=resolved_settings.stripe_webhook_secret,
    )
    billing_service = BillingService(
        client=billing_client,
        users=user_repository,
        price_id=resolved_settings.stripe_price_id,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_service=UserService(user_repository),
        meal_service=MealService(meal_repository),
        vision_service=vision_service,
        billing_service=billing_service,
        close_resources=close_resources,
    )
