"""Stripe boundary: exceptions become results, signatures are checked."""

import asyncio
from types import SimpleNamespace

import pytest
import stripe

from stripepay.services.gateway.processor import (
    IntentCreated,
    ProcessorFailure,
    StripeProcessor,
    WebhookVerificationError,
    parse_unverified_event,
)


@pytest.fixture
def stripe_processor():
    return StripeProcessor(api_key="sk_test_key", api_version="2024-06-20")


def test_create_payment_intent_success(stripe_processor, monkeypatch):
    captured = {}

    async def fake_create_async(**params):
        captured.update(params)
        return SimpleNamespace(id="pi_42", client_secret="pi_42_secret_xyz")

    monkeypatch.setattr(stripe.PaymentIntent, "create_async", fake_create_async)

    result = asyncio.run(stripe_processor.create_payment_intent(2500, "usd", {"orderId": "7"}))

    assert result == IntentCreated(client_secret="pi_42_secret_xyz", intent_id="pi_42")
    assert captured["amount"] == 2500
    assert captured["currency"] == "usd"
    assert captured["metadata"] == {"orderId": "7"}
    assert captured["automatic_payment_methods"] == {"enabled": True}
    assert captured["api_key"] == "sk_test_key"
    assert captured["stripe_version"] == "2024-06-20"


def test_create_payment_intent_stripe_error(stripe_processor, monkeypatch):
    async def fake_create_async(**params):
        raise stripe.APIConnectionError("connection reset")

    monkeypatch.setattr(stripe.PaymentIntent, "create_async", fake_create_async)

    result = asyncio.run(stripe_processor.create_payment_intent(2500, "usd", {}))

    assert isinstance(result, ProcessorFailure)
    assert result.error_type == "APIConnectionError"


def test_create_payment_intent_unexpected_error(stripe_processor, monkeypatch):
    async def fake_create_async(**params):
        raise RuntimeError("boom")

    monkeypatch.setattr(stripe.PaymentIntent, "create_async", fake_create_async)

    result = asyncio.run(stripe_processor.create_payment_intent(2500, "usd", {}))

    assert result == ProcessorFailure(error_type="RuntimeError", message="boom")


def test_construct_event_valid(stripe_processor, sign):
    body = '{"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {}}}'

    event = stripe_processor.construct_event(body.encode(), sign(body, secret="whsec_a"), "whsec_a")

    assert event["type"] == "payment_intent.succeeded"


def test_construct_event_bad_signature(stripe_processor):
    with pytest.raises(WebhookVerificationError):
        stripe_processor.construct_event(b"{}", "t=1,v1=abc", "whsec_a")


def test_construct_event_without_header(stripe_processor):
    with pytest.raises(WebhookVerificationError):
        stripe_processor.construct_event(b"{}", None, "whsec_a")


def test_construct_event_signed_garbage(stripe_processor, sign):
    """A correctly signed body that is not JSON is still refused."""

    with pytest.raises(WebhookVerificationError):
        stripe_processor.construct_event(b"not json", sign("not json", secret="whsec_a"), "whsec_a")


def test_parse_unverified_event():
    assert parse_unverified_event(b'{"type": "x"}') == {"type": "x"}
    with pytest.raises(WebhookVerificationError):
        parse_unverified_event(b"")


def test_create_payment_intent_without_key_skips_stripe(monkeypatch):
    async def fake_create_async(**params):
        raise AssertionError("Stripe must not be called without an API key")

    monkeypatch.setattr(stripe.PaymentIntent, "create_async", fake_create_async)

    result = asyncio.run(StripeProcessor(api_key="", api_version="2024-06-20").create_payment_intent(2500, "usd", {}))

    assert result.error_type == "AuthenticationError"
