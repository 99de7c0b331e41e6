"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client, PostgrestAPIError

from nutrilens.domain.users import SubscriptionStatus, UserRecord
from nutrilens.errors import conflict_error
from nutrilens.services.users import UserRepository

_UNIQUE_VIOLATION = "23505"
_COLUMNS = (
    "id, username, password_hash, display_name, profile_picture, created_at, "
    "stripe_customer_id, stripe_subscription_id, subscription_status, "
    "subscription_expires_at"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_by_id(self, user_id: int) -> UserRecord | None:
        """Return the user with the given id, if present."""
        return self._select_one("id", user_id)

    def get_by_username(self, username: str) -> UserRecord | None:
        """Return the user with the given username, if present."""
        return self._select_one("username", username)

    def get_by_stripe_customer_id(self, customer_id: str) -> UserRecord | None:
        """Return the user linked to a Stripe customer, if present."""
        return self._select_one("stripe_customer_id", customer_id)

    def create_user(
        self,
        username: str,
        password_hash: str,
        display_name: str | None,
        profile_picture: str | None,
    ) -> UserRecord:
        """Create a new user row and return it."""
        try:
            response = (
                self.client.table("users")
                .insert(
                    {
                        "username": username,
                        "password_hash": password_hash,
                        "display_name": display_name,
                        "profile_picture": profile_picture,
                        "subscription_status": SubscriptionStatus.NONE.value,
                    }
                )
                .execute()
            )
        except PostgrestAPIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise conflict_error("Username already exists") from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def update_profile(self, user_id: int, changes: dict[str, str | None]) -> UserRecord:
        """Update profile columns and return the user."""
        return self._update(user_id, dict(changes))

    def update_billing(  # noqa: PLR0913
        self,
        user_id: int,
        *,
        stripe_customer_id: str | None = None,
        stripe_subscription_id: str | None = None,
        subscription_status: SubscriptionStatus | None = None,
        subscription_expires_at: datetime | None = None,
    ) -> UserRecord:
        """Update the provided billing columns and return the user."""
        payload: dict[str, object] = {}
        if stripe_customer_id is not None:
            payload["stripe_customer_id"] = stripe_customer_id
        if stripe_subscription_id is not None:
            payload["stripe_subscription_id"] = stripe_subscription_id
        if subscription_status is not None:
            payload["subscription_status"] = subscription_status.value
        if subscription_expires_at is not None:
            payload["subscription_expires_at"] = subscription_expires_at.isoformat()
        return self._update(user_id, payload)

    def _select_one(self, column: str, value: object) -> UserRecord | None:
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq(column, value)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def _update(self, user_id: int, payload: dict[str, object]) -> UserRecord:
        if not payload:
            current = self.get_by_id(user_id)
            if current is None:
                raise RuntimeError(f"User {user_id} not found")
            return current
        response = (
            self.client.table("users").update(payload).eq("id", user_id).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update user {user_id}")
        return _parse_user(response.data[0])


def _parse_user(row: dict[str, object]) -> UserRecord:
    expires_at = row.get("subscription_expires_at")
    return UserRecord(
        id=int(row["id"]),
        username=str(row["username"]),
        password_hash=str(row.get("password_hash") or ""),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        display_name=row.get("display_name"),
        profile_picture=row.get("profile_picture"),
        stripe_customer_id=row.get("stripe_customer_id"),
        stripe_subscription_id=row.get("stripe_subscription_id"),
        subscription_status=SubscriptionStatus.from_provider(
            row.get("subscription_status") or SubscriptionStatus.NONE.value
        ),
        subscription_expires_at=datetime.fromisoformat(str(expires_at))
        if expires_at
        else None,
    )
