"""Request and response models for the HTTP API."""

from datetime import datetime

from pydantic import Field, StrictStr, field_validator

from nutrilens.domain.billing import SubscriptionIntent
from nutrilens.domain.meals import MealRecord
from nutrilens.domain.users import SubscriptionStatus, UserRecord
from nutrilens.domain.vision import CamelModel, FoodItem
from nutrilens.services.passwords import BCRYPT_MAX_PASSWORD_BYTES


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RegisterRequest(CamelModel):
    """Registration form."""

    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
    confirm_password: str
    display_name: str | None = Field(default=None, min_length=2, max_length=100)
    profile_picture: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        return value

    @field_validator("display_name", mode="before")
    @classmethod
    def blank_display_name_to_none(cls, value: object) -> object:
        return _blank_to_none(value)


class LoginRequest(CamelModel):
    """Login form."""

    username: str
    password: str


class ProfileUpdateRequest(CamelModel):
    """Profile changes; only fields present in the body are applied."""

    display_name: str | None = Field(default=None, min_length=2, max_length=100)
    profile_picture: str | None = None

    @field_validator("display_name", mode="before")
    @classmethod
    def blank_display_name_to_none(cls, value: object) -> object:
        return _blank_to_none(value)


class AnalyzeRequest(CamelModel):
    """Image to analyze, as raw base64 or a data URL."""

    image_data: StrictStr = Field(min_length=1)


class UserOut(CamelModel):
    """User as returned to clients, without credentials."""

    id: int
    username: str
    display_name: str | None
    profile_picture: str | None
    created_at: datetime
    stripe_customer_id: str | None
    stripe_subscription_id: str | None
    subscription_status: SubscriptionStatus
    subscription_expires_at: datetime | None
    has_active_subscription: bool

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            profile_picture=user.profile_picture,
            created_at=user.created_at,
            stripe_customer_id=user.stripe_customer_id,
            stripe_subscription_id=user.stripe_subscription_id,
            subscription_status=user.subscription_status,
            subscription_expires_at=user.subscription_expires_at,
            has_active_subscription=user.has_active_subscription(),
        )


class MealRecordOut(CamelModel):
    """Stored meal record."""

    id: int
    user_id: int | None
    name: str
    image_data: str
    total_calories: int
    confidence_score: int
    timestamp: datetime
    food_items: list[FoodItem]

    @classmethod
    def from_record(cls, record: MealRecord) -> "MealRecordOut":
        return cls(
            id=record.id,
            user_id=record.user_id,
            name=record.name,
            image_data=record.image_data,
            total_calories=record.total_calories,
            confidence_score=record.confidence_score,
            timestamp=record.timestamp,
            food_items=record.food_items,
        )


class SubscriptionOut(CamelModel):
    """Client secret for the hosted payment form."""

    subscription_id: str
    client_secret: str

    @classmethod
    def from_intent(cls, intent: SubscriptionIntent) -> "SubscriptionOut":
        return cls(
            subscription_id=intent.subscription_id,
            client_secret=intent.client_secret,
        )


class MessageOut(CamelModel):
    """Plain acknowledgement."""

    message: str
