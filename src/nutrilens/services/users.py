"""User-related business logic."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from nutrilens.domain.users import SubscriptionStatus, UserRecord
from nutrilens.errors import auth_error, conflict_error, validation_error
from nutrilens.services.passwords import (
    BCRYPT_MAX_PASSWORD_BYTES,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_by_id(self, user_id: int) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def get_by_username(self, username: str) -> UserRecord | None:
        """Return the user with the given username, if present."""

    def get_by_stripe_customer_id(self, customer_id: str) -> UserRecord | None:
        """Return the user linked to a billing customer, if present."""

    def create_user(
        self,
        username: str,
        password_hash: str,
        display_name: str | None,
        profile_picture: str | None,
    ) -> UserRecord:
        """Create and return a new user record."""

    def update_profile(self, user_id: int, changes: dict[str, str | None]) -> UserRecord:
        """Apply profile changes and return the updated user."""

    def update_billing(  # noqa: PLR0913
        self,
        user_id: int,
        *,
        stripe_customer_id: str | None = None,
        stripe_subscription_id: str | None = None,
        subscription_status: SubscriptionStatus | None = None,
        subscription_expires_at: datetime | None = None,
    ) -> UserRecord:
        """Update the provided billing fields and return the user."""


@dataclass
class UserService:
    """Application service for registration, login and profiles."""

    repository: UserRepository

    def register(  # noqa: PLR0913
        self,
        username: str,
        password: str,
        confirm_password: str,
        display_name: str | None = None,
        profile_picture: str | None = None,
    ) -> UserRecord:
        """Create a new account."""
        if password != confirm_password:
            raise validation_error("Passwords do not match")
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise validation_error(
                f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
        if self.repository.get_by_username(username):
            raise conflict_error("Username already exists")
        user = self.repository.create_user(
            username=username,
            password_hash=hash_password(password),
            display_name=display_name,
            profile_picture=profile_picture,
        )
        logger.info("User registered", extra={"user_id": user.id})
        return user

    def authenticate(self, username: str, password: str) -> UserRecord:
        """Return the user for valid credentials."""
        user = self.repository.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            raise auth_error("Invalid username or password")
        return user

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id."""
        return self.repository.get_by_id(user_id)

    def update_profile(
        self, user_id: int, changes: dict[str, str | None]
    ) -> UserRecord:
        """Update display name and/or profile picture."""
        if not changes:
            user = self.repository.get_by_id(user_id)
            if user is None:
                raise auth_error()
            return user
        return self.repository.update_profile(user_id, changes)
