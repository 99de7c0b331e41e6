"""Domain models for subscription billing."""

from dataclasses import dataclass

from nutrilens.domain.users import SubscriptionStatus


@dataclass(frozen=True)
class SubscriptionIntent:
    """Subscription awaiting payment through the hosted payment form."""

    subscription_id: str
    status: SubscriptionStatus
    client_secret: str
