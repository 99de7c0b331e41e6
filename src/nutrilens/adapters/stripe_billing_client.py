"""Stripe adapter for subscriptions and webhook verification."""

import json
from dataclasses import dataclass

import stripe

from nutrilens.domain.billing import SubscriptionIntent
from nutrilens.domain.users import SubscriptionStatus
from nutrilens.errors import validation_error
from nutrilens.services.billing import BillingClient


@dataclass
class StripeBillingClient(BillingClient):
    """Billing client backed by the Stripe API."""

    api_key: str
    webhook_secret: str

    @classmethod
    def create(cls, api_key: str, webhook_secret: str) -> "StripeBillingClient":
        """Create a Stripe billing client."""
        return cls(api_key=api_key, webhook_secret=webhook_secret)

    async def create_customer(self, *, username: str, user_id: int) -> str:
        """Create a Stripe customer tagged with our user id."""
        customer = await stripe.Customer.create_async(
            api_key=self.api_key,
            name=username,
            metadata={"user_id": str(user_id)},
        )
        return customer.id

    async def create_subscription(
        self, *, customer_id: str, price_id: str
    ) -> SubscriptionIntent:
        """Create an incomplete subscription paid through Payment Element."""
        subscription = await stripe.Subscription.create_async(
            api_key=self.api_key,
            customer=customer_id,
            items=[{"price": price_id}],
            payment_behavior="default_incomplete",
            payment_settings={"save_default_payment_method": "on_subscription"},
            expand=["latest_invoice.confirmation_secret"],
        )
        invoice = subscription.latest_invoice
        confirmation = getattr(invoice, "confirmation_secret", None)
        client_secret = getattr(confirmation, "client_secret", None)
        if not client_secret:
            raise RuntimeError("Stripe did not return a payment client secret")
        return SubscriptionIntent(
            subscription_id=subscription.id,
            status=SubscriptionStatus.from_provider(subscription.status),
            client_secret=client_secret,
        )

    def verify_event(self, payload: bytes, signature: str) -> dict[str, object]:
        """Check the Stripe-Signature header and decode the event body."""
        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, tolerance=300
            )
        except (UnicodeDecodeError, stripe.SignatureVerificationError) as exc:
            raise validation_error("Webhook signature verification failed") from exc
        try:
            event = json.loads(body)
        except ValueError as exc:
            raise validation_error("Webhook payload is not valid JSON") from exc
        if not isinstance(event, dict):
            raise validation_error("Webhook payload is not an event object")
        return event
