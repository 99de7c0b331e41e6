"""Subscription checkout and payment webhook endpoints."""

import logging

from fastapi import APIRouter, Depends, Header, Request

from nutrilens.api.deps import get_container, require_user
from nutrilens.api.schemas import SubscriptionOut
from nutrilens.containers import AppContainer
from nutrilens.domain.users import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])


@router.post("/create-subscription")
async def create_subscription(
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> SubscriptionOut:
    """Start a subscription and return the payment form client secret."""
    intent = await container.billing_service.start_subscription(user)
    return SubscriptionOut.from_intent(intent)


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> dict[str, bool]:
    """Apply a signed Stripe event."""
    payload = await request.body()
    event_type = container.billing_service.handle_webhook(payload, stripe_signature)
    logger.info("Stripe webhook processed", extra={"type": event_type})
    return {"received": True}
