"""Subscription billing service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from nutrilens.domain.billing import SubscriptionIntent
from nutrilens.domain.users import SubscriptionStatus, UserRecord
from nutrilens.errors import AppError, conflict_error, upstream_error, validation_error
from nutrilens.services.users import UserRepository

logger = logging.getLogger(__name__)

PAYMENT_EVENTS = frozenset({"invoice.paid", "invoice.payment_succeeded"})
SUBSCRIPTION_EVENTS = frozenset(
    {"customer.subscription.created", "customer.subscription.updated"}
)
CANCELLATION_EVENT = "customer.subscription.deleted"


class BillingClient(Protocol):
    """Interface for the payment provider."""

    async def create_customer(self, *, username: str, user_id: int) -> str:
        """Create a billing customer and return its id."""

    async def create_subscription(
        self, *, customer_id: str, price_id: str
    ) -> SubscriptionIntent:
        """Create an incomplete subscription awaiting payment."""

    def verify_event(self, payload: bytes, signature: str) -> dict[str, object]:
        """Verify a webhook signature and return the decoded event."""


@dataclass
class BillingService:
    """Starts subscriptions and applies provider webhook events to users."""

    client: BillingClient
    users: UserRepository
    price_id: str

    async def start_subscription(self, user: UserRecord) -> SubscriptionIntent:
        """Create a subscription for the user and return the payment client secret."""
        if user.has_active_subscription():
            raise conflict_error("Subscription already active")
        try:
            customer_id = user.stripe_customer_id
            if customer_id is None:
                customer_id = await self.client.create_customer(
                    username=user.username, user_id=user.id
                )
                self.users.update_billing(user.id, stripe_customer_id=customer_id)
            intent = await self.client.create_subscription(
                customer_id=customer_id, price_id=self.price_id
            )
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Subscription creation failed", extra={"user_id": user.id})
            raise upstream_error("Error creating subscription", str(exc)) from exc
        self.users.update_billing(
            user.id,
            stripe_subscription_id=intent.subscription_id,
            subscription_status=intent.status,
        )
        return intent

    def handle_webhook(self, payload: bytes, signature: str | None) -> str:
        """Verify and apply a webhook event, returning its type."""
        if not signature:
            raise validation_error("Missing Stripe-Signature header")
        event = self.client.verify_event(payload, signature)
        event_type = str(event.get("type", ""))
        data = event.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        if not isinstance(obj, dict):
            logger.warning("Webhook event without object", extra={"type": event_type})
            return event_type

        if event_type in PAYMENT_EVENTS:
            self._apply(
                obj.get("customer"),
                subscription_status=SubscriptionStatus.ACTIVE,
                subscription_expires_at=_invoice_period_end(obj),
            )
        elif event_type in SUBSCRIPTION_EVENTS:
            self._apply(
                obj.get("customer"),
                stripe_subscription_id=_optional_str(obj.get("id")),
                subscription_status=SubscriptionStatus.from_provider(obj.get("status")),
                subscription_expires_at=_subscription_period_end(obj),
            )
        elif event_type == CANCELLATION_EVENT:
            self._apply(
                obj.get("customer"),
                subscription_status=SubscriptionStatus.CANCELED,
            )
        else:
            logger.info("Ignoring webhook event", extra={"type": event_type})
        return event_type

    def _apply(self, customer_id: object, **changes: object) -> None:
        if not isinstance(customer_id, str):
            logger.warning("Webhook event without customer id")
            return
        user = self.users.get_by_stripe_customer_id(customer_id)
        if user is None:
            logger.warning("Webhook for unknown customer", extra={"customer": customer_id})
            return
        self.users.update_billing(user.id, **changes)
        logger.info(
            "Subscription updated",
            extra={"user_id": user.id, "status": str(changes.get("subscription_status"))},
        )


def _invoice_period_end(invoice: dict[str, object]) -> datetime | None:
    lines = invoice.get("lines")
    rows = lines.get("data") if isinstance(lines, dict) else None
    if not rows or not isinstance(rows[0], dict):
        return None
    period = rows[0].get("period")
    return _from_timestamp(period.get("end") if isinstance(period, dict) else None)


def _subscription_period_end(subscription: dict[str, object]) -> datetime | None:
    if subscription.get("current_period_end") is not None:
        return _from_timestamp(subscription["current_period_end"])
    items = subscription.get("items")
    rows = items.get("data") if isinstance(items, dict) else None
    if not rows or not isinstance(rows[0], dict):
        return None
    return _from_timestamp(rows[0].get("current_period_end"))


def _from_timestamp(value: object) -> datetime | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    return None


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None
