"""Tests for billing service."""

import asyncio
import json
from datetime import UTC, datetime, timedelta

import pytest

from nutrilens.domain.users import SubscriptionStatus
from nutrilens.errors import AppError, ErrorKind
from nutrilens.services.billing import BillingService
from nutrilens.services.passwords import hash_password
from tests.fakes import VALID_SIGNATURE, FakeBillingClient, InMemoryUserRepository

PERIOD_END = 1767225600


def _setup() -> tuple[BillingService, FakeBillingClient, InMemoryUserRepository]:
    users = InMemoryUserRepository()
    client = FakeBillingClient()
    service = BillingService(client=client, users=users, price_id="price_123")
    return service, client, users


def _event(event_type: str, obj: dict[str, object]) -> bytes:
    return json.dumps({"type": event_type, "data": {"object": obj}}).encode()


def test_start_subscription_creates_customer_once() -> None:
    service, client, users = _setup()
    user = users.create_user("alice", hash_password("secret1"), None, None)

    intent = asyncio.run(service.start_subscription(user))
    stored = users.get_by_id(user.id)
    assert stored is not None
    asyncio.run(service.start_subscription(stored))

    assert intent.client_secret == "pi_secret_123"
    assert client.customers == [("alice", user.id)]
    assert client.subscriptions[0] == ("cus_1", "price_123")
    stored = users.get_by_id(user.id)
    assert stored is not None
    assert stored.stripe_customer_id == "cus_1"
    assert stored.subscription_status == SubscriptionStatus.INCOMPLETE


def test_start_subscription_rejects_active_users() -> None:
    service, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)
    active = users.update_billing(user.id, subscription_status=SubscriptionStatus.ACTIVE)

    with pytest.raises(AppError) as excinfo:
        asyncio.run(service.start_subscription(active))

    assert excinfo.value.kind == ErrorKind.CONFLICT


def test_start_subscription_relays_provider_errors() -> None:
    service, client, users = _setup()
    client.error = RuntimeError("card declined")
    user = users.create_user("alice", "hash", None, None)

    with pytest.raises(AppError) as excinfo:
        asyncio.run(service.start_subscription(user))

    assert excinfo.value.kind == ErrorKind.UPSTREAM
    assert excinfo.value.cause == "card declined"


def test_webhook_requires_signature() -> None:
    service, _, _ = _setup()

    with pytest.raises(AppError) as excinfo:
        service.handle_webhook(_event("invoice.paid", {}), None)

    assert excinfo.value.kind == ErrorKind.VALIDATION


def test_invoice_paid_activates_subscription() -> None:
    service, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)
    users.update_billing(user.id, stripe_customer_id="cus_1")
    invoice = {
        "customer": "cus_1",
        "lines": {"data": [{"period": {"start": PERIOD_END - 86400, "end": PERIOD_END}}]},
    }

    event_type = service.handle_webhook(_event("invoice.paid", invoice), VALID_SIGNATURE)

    stored = users.get_by_id(user.id)
    assert event_type == "invoice.paid"
    assert stored is not None
    assert stored.subscription_status == SubscriptionStatus.ACTIVE
    assert stored.subscription_expires_at == datetime.fromtimestamp(PERIOD_END, tz=UTC)


def test_subscription_updated_copies_status_and_period() -> None:
    service, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)
    users.update_billing(user.id, stripe_customer_id="cus_1")
    subscription = {
        "id": "sub_9",
        "customer": "cus_1",
        "status": "past_due",
        "items": {"data": [{"current_period_end": PERIOD_END}]},
    }

    service.handle_webhook(
        _event("customer.subscription.updated", subscription), VALID_SIGNATURE
    )

    stored = users.get_by_id(user.id)
    assert stored is not None
    assert stored.stripe_subscription_id == "sub_9"
    assert stored.subscription_status == SubscriptionStatus.PAST_DUE


def test_subscription_deleted_cancels() -> None:
    service, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)
    users.update_billing(
        user.id,
        stripe_customer_id="cus_1",
        subscription_status=SubscriptionStatus.ACTIVE,
    )

    service.handle_webhook(
        _event("customer.subscription.deleted", {"customer": "cus_1"}),
        VALID_SIGNATURE,
    )

    stored = users.get_by_id(user.id)
    assert stored is not None
    assert stored.subscription_status == SubscriptionStatus.CANCELED


def test_webhook_ignores_unknown_customers_and_events() -> None:
    service, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)

    service.handle_webhook(_event("invoice.paid", {"customer": "cus_x"}), VALID_SIGNATURE)
    service.handle_webhook(_event("charge.refunded", {}), VALID_SIGNATURE)

    stored = users.get_by_id(user.id)
    assert stored is not None
    assert stored.subscription_status == SubscriptionStatus.NONE


def test_future_expiry_counts_as_active() -> None:
    _, _, users = _setup()
    user = users.create_user("alice", "hash", None, None)
    paid = users.update_billing(
        user.id,
        subscription_status=SubscriptionStatus.CANCELED,
        subscription_expires_at=datetime.now(tz=UTC) + timedelta(days=3),
    )

    assert paid.has_active_subscription()
