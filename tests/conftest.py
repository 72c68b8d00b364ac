"""Shared fixtures: app factory with a recording processor and webhook signing."""

import hashlib
import hmac
import json
import time

import pytest
from fastapi.testclient import TestClient

from stripepay.common.config import load_settings
from stripepay.services.gateway.main import create_app
from stripepay.services.gateway.processor import IntentCreated, StripeProcessor

WEBHOOK_SECRET = "whsec_test_secret"


class RecordingProcessor(StripeProcessor):
    """Stripe processor whose intent call is canned; signature checks stay real."""

    def __init__(self, result=None) -> None:
        super().__init__(api_key="sk_test_recording", api_version="2024-06-20")
        self.result = result or IntentCreated(client_secret="pi_123_secret_abc", intent_id="pi_123")
        self.calls: list[dict] = []

    async def create_payment_intent(self, amount, currency, metadata):
        self.calls.append({"amount": amount, "currency": currency, "metadata": metadata})
        return self.result


@pytest.fixture
def processor():
    return RecordingProcessor()


@pytest.fixture
def make_client(processor):
    """Build a TestClient for the given settings overrides."""

    def _make(**overrides) -> TestClient:
        overrides.setdefault("stripe_secret_key", "sk_test_placeholder")
        overrides.setdefault("allowed_origins", "")
        overrides.setdefault("stripe_webhook_secret", "")
        return TestClient(create_app(load_settings(**overrides), processor))

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def sign():
    """Return a helper producing a valid `stripe-signature` header."""

    def _sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
        timestamp = int(time.time()) if timestamp is None else timestamp
        digest = hmac.new(
            secret.encode("utf-8"),
            f"{timestamp}.{payload}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return f"t={timestamp},v1={digest}"

    return _sign


def event_body(event_type: str, intent: dict | None = None) -> str:
    return json.dumps({"id": "evt_1", "object": "event", "type": event_type, "data": {"object": intent or {}}})


@pytest.fixture
def make_event():
    return event_body
