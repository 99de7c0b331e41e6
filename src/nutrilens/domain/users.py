"""Domain models for users and their subscriptions."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum


class SubscriptionStatus(StrEnum):
    """Subscription states mirrored from the billing provider."""

    NONE = "none"
    ACTIVE = "active"
    TRIALING = "trialing"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    PAST_DUE = "past_due"
    UNPAID = "unpaid"
    CANCELED = "canceled"
    PAUSED = "paused"

    @classmethod
    def from_provider(cls, raw: object) -> "SubscriptionStatus":
        """Map a provider status string, falling back to NONE."""
        try:
            return cls(str(raw))
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: int
    username: str
    password_hash: str
    created_at: datetime
    display_name: str | None = None
    profile_picture: str | None = None
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    subscription_status: SubscriptionStatus = SubscriptionStatus.NONE
    subscription_expires_at: datetime | None = None

    def has_active_subscription(self, now: datetime | None = None) -> bool:
        """Return True when the subscription is active or paid through a future date."""
        if self.subscription_status == SubscriptionStatus.ACTIVE:
            return True
        if self.subscription_expires_at is None:
            return False
        return self.subscription_expires_at > (now or datetime.now(tz=UTC))
