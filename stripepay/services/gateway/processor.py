"""Stripe boundary for the gateway.

Exceptions raised by the Stripe SDK stop here: payment intent creation returns
a result value the handler branches on, and webhook parsing raises a single
`WebhookVerificationError` carrying a client-safe message.
"""

import json
from typing import Any, Protocol

import stripe
from pydantic import BaseModel, ConfigDict

from stripepay.common.logging import logger


class IntentCreated(BaseModel):
    """Stripe accepted the intent."""

    model_config = ConfigDict(frozen=True)

    client_secret: str
    intent_id: str = ""


class ProcessorFailure(BaseModel):
    """Stripe call failed; details are for logs only."""

    model_config = ConfigDict(frozen=True)

    error_type: str
    message: str


PaymentIntentResult = IntentCreated | ProcessorFailure


class WebhookVerificationError(ValueError):
    """Webhook body could not be authenticated or parsed."""


class PaymentProcessor(Protocol):
    async def create_payment_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntentResult: ...

    def construct_event(self, payload: bytes, signature: str | None, secret: str) -> dict[str, Any]: ...


def parse_unverified_event(payload: bytes) -> dict[str, Any]:
    """Decode a webhook body as JSON without checking who sent it."""

    try:
        return json.loads(payload)
    except ValueError as exc:
        raise WebhookVerificationError(str(exc)) from exc


class StripeProcessor:
    """Talks to Stripe with a fixed API key and pinned API version."""

    def __init__(self, api_key: str, api_version: str, webhook_tolerance: int = 300) -> None:
        self.api_key = api_key
        self.api_version = api_version
        self.webhook_tolerance = webhook_tolerance

    async def create_payment_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntentResult:
        """Create a PaymentIntent with automatic payment methods enabled."""

        if not self.api_key:
            logger.error("create-payment-intent error: STRIPE_SECRET_KEY is not configured")
            return ProcessorFailure(error_type="AuthenticationError", message="No Stripe API key configured")
        try:
            intent = await stripe.PaymentIntent.create_async(
                api_key=self.api_key,
                stripe_version=self.api_version,
                amount=amount,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            logger.error(
                "stripe create-payment-intent failed type=%s code=%s status=%s request_id=%s message=%s",
                type(exc).__name__,
                exc.code,
                exc.http_status,
                exc.request_id,
                exc.user_message or str(exc),
            )
            return ProcessorFailure(error_type=type(exc).__name__, message=str(exc))
        except Exception as exc:
            logger.exception("create-payment-intent error: %s", exc)
            return ProcessorFailure(error_type=type(exc).__name__, message=str(exc))
        return IntentCreated(client_secret=intent.client_secret, intent_id=intent.id)

    def construct_event(self, payload: bytes, signature: str | None, secret: str) -> dict[str, Any]:
        """Verify the `stripe-signature` header against the body and parse it."""

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(body, signature or "", secret, self.webhook_tolerance)
            return json.loads(body)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookVerificationError(str(exc)) from exc
