"""Tests for provider adapters."""

import asyncio
import hashlib
import hmac
import json
import time
from types import SimpleNamespace

import pytest
import stripe

from nutrilens.adapters.openai_vision_client import OpenAIVisionClient
from nutrilens.adapters.stripe_billing_client import StripeBillingClient
from nutrilens.domain.users import SubscriptionStatus
from nutrilens.errors import AppError, ErrorKind
from tests.fakes import analysis_payload


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)


def _extract(client: OpenAIVisionClient) -> dict[str, object]:
    return asyncio.run(
        client.extract(
            model="gpt-4o",
            reasoning_effort=None,
            store=False,
            max_output_tokens=1000,
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            prompt="Analyze this food image",
        )
    )


def test_openai_vision_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps(analysis_payload()))
    client = OpenAIVisionClient(client=fake)

    result = _extract(client)

    assert result == analysis_payload()
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["max_output_tokens"] == 1000
    assert "reasoning" not in payload
    content = payload["input"][0]["content"]
    assert content[1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


def test_openai_vision_client_rejects_empty_output() -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError):
        _extract(client)


def test_openai_vision_client_rejects_non_json() -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI("not json"))

    with pytest.raises(ValueError):
        _extract(client)


def _sign(payload: str, secret: str) -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def test_stripe_client_verifies_signed_event() -> None:
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")
    body = json.dumps({"type": "invoice.paid", "data": {"object": {}}})

    event = client.verify_event(body.encode(), _sign(body, "whsec_1"))

    assert event["type"] == "invoice.paid"


def test_stripe_client_rejects_bad_signature() -> None:
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")
    body = json.dumps({"type": "invoice.paid"})

    with pytest.raises(AppError) as excinfo:
        client.verify_event(body.encode(), _sign(body, "whsec_other"))

    assert excinfo.value.kind == ErrorKind.VALIDATION


def test_stripe_client_rejects_undecodable_body() -> None:
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")

    with pytest.raises(AppError) as excinfo:
        client.verify_event(b"\xff\xfe", "t=1,v1=abc")

    assert excinfo.value.kind == ErrorKind.VALIDATION


def test_stripe_client_rejects_signed_non_json_body() -> None:
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")
    body = "not json"

    with pytest.raises(AppError) as excinfo:
        client.verify_event(body.encode(), _sign(body, "whsec_1"))

    assert excinfo.value.kind == ErrorKind.VALIDATION


def test_stripe_client_creates_subscription(monkeypatch) -> None:
    seen: dict[str, object] = {}

    async def fake_create_subscription(**kwargs):  # type: ignore[no-untyped-def]
        seen.update(kwargs)
        return SimpleNamespace(
            id="sub_1",
            status="incomplete",
            latest_invoice=SimpleNamespace(
                confirmation_secret=SimpleNamespace(client_secret="pi_secret")
            ),
        )

    monkeypatch.setattr(stripe.Subscription, "create_async", fake_create_subscription)
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")

    intent = asyncio.run(
        client.create_subscription(customer_id="cus_1", price_id="price_1")
    )

    assert intent.subscription_id == "sub_1"
    assert intent.status == SubscriptionStatus.INCOMPLETE
    assert intent.client_secret == "pi_secret"
    assert seen["api_key"] == "sk_test"
    assert seen["items"] == [{"price": "price_1"}]


def test_stripe_client_requires_client_secret(monkeypatch) -> None:
    async def fake_create_subscription(**kwargs):  # type: ignore[no-untyped-def]
        return SimpleNamespace(id="sub_1", status="incomplete", latest_invoice=None)

    monkeypatch.setattr(stripe.Subscription, "create_async", fake_create_subscription)
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")

    with pytest.raises(RuntimeError):
        asyncio.run(client.create_subscription(customer_id="cus_1", price_id="p"))


def test_stripe_client_creates_customer(monkeypatch) -> None:
    async def fake_create_customer(**kwargs):  # type: ignore[no-untyped-def]
        assert kwargs["metadata"] == {"user_id": "7"}
        return SimpleNamespace(id="cus_7")

    monkeypatch.setattr(stripe.Customer, "create_async", fake_create_customer)
    client = StripeBillingClient.create(api_key="sk_test", webhook_secret="whsec_1")

    assert asyncio.run(client.create_customer(username="alice", user_id=7)) == "cus_7"
