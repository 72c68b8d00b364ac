"""Payment-intent and webhook handling behind the HTTP routes."""

from time import perf_counter
from typing import Any

from stripepay.common.config import Settings
from stripepay.common.logging import logger
from stripepay.common.metrics import (
    payment_intent_latency_seconds,
    payment_intent_requests_total,
    webhook_events_total,
    webhook_rejections_total,
)
from stripepay.services.gateway.processor import (
    IntentCreated,
    PaymentIntentResult,
    PaymentProcessor,
    WebhookVerificationError,
    parse_unverified_event,
)
from stripepay.services.gateway.schemas import PaymentIntentRequest, WebhookEvent
from stripepay.services.gateway.validation import (
    coerce_metadata,
    is_valid_amount,
    is_valid_currency,
    stringify_value,
)


# Metric label values for webhook types; everything else is counted as "other".
HANDLED_EVENT_TYPES = frozenset({"payment_intent.succeeded", "payment_intent.payment_failed"})


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class PaymentRequestError(ValueError):
    """Client supplied an amount or currency the gateway will not accept."""


class GatewayService:
    """Stateless request handling; holds only read-only config and the processor."""

    def __init__(self, settings: Settings, processor: PaymentProcessor) -> None:
        self.settings = settings
        self.processor = processor

    def _reject(self, outcome: str, message: str) -> PaymentRequestError:
        payment_intent_requests_total.labels(service=self.settings.service_name, outcome=outcome).inc()
        return PaymentRequestError(message)

    async def create_payment_intent(self, req: PaymentIntentRequest) -> PaymentIntentResult:
        """Validate the request and ask Stripe for an intent.

        Raises `PaymentRequestError` for bad input; Stripe failures come back
        as `ProcessorFailure`.
        """

        if not is_valid_amount(req.amount_in_cents):
            raise self._reject("invalid_amount", "Invalid amount")
        currency = stringify_value(req.currency)
        if not is_valid_currency(currency):
            raise self._reject("unsupported_currency", "Unsupported currency")

        start = perf_counter()
        result = await self.processor.create_payment_intent(
            amount=int(req.amount_in_cents),
            currency=currency.lower(),
            metadata=coerce_metadata(req.metadata),
        )
        payment_intent_latency_seconds.labels(service=self.settings.service_name).observe(
            max(0.0, perf_counter() - start)
        )
        outcome = "created" if isinstance(result, IntentCreated) else "processor_error"
        payment_intent_requests_total.labels(service=self.settings.service_name, outcome=outcome).inc()
        return result

    def parse_event(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """Authenticate (when a signing secret is set) and parse a webhook body."""

        secret = self.settings.stripe_webhook_secret.get_secret_value()
        try:
            if secret:
                raw = self.processor.construct_event(payload, signature, secret)
            elif self.settings.allow_unsigned_webhooks:
                raw = parse_unverified_event(payload)
            else:
                raise WebhookVerificationError("webhook signing secret is not configured")
            if not isinstance(raw, dict):
                raise WebhookVerificationError("event payload must be a JSON object")
        except WebhookVerificationError as exc:
            webhook_rejections_total.labels(
                service=self.settings.service_name,
                reason="signature" if secret else "payload",
            ).inc()
            logger.error("Webhook signature verification failed. %s", exc)
            raise
        return WebhookEvent.model_validate(raw)

    def dispatch_event(self, event: WebhookEvent) -> None:
        """Act on the payment events the gateway cares about; anything else is just acknowledged."""

        event_type = event.event_type
        webhook_events_total.labels(
            service=self.settings.service_name,
            event_type=event_type if event_type in HANDLED_EVENT_TYPES else "other",
        ).inc()
        intent = event.data_object
        if event_type == "payment_intent.succeeded":
            # Order bookkeeping lives outside this service; record what it would need.
            logger.info(
                "payment succeeded intent_id=%s order_id=%s",
                intent.get("id"),
                _as_dict(intent.get("metadata")).get("orderId"),
            )
        elif event_type == "payment_intent.payment_failed":
            last_error = _as_dict(intent.get("last_payment_error"))
            logger.warning("Payment failed: %s", last_error.get("message"))
        else:
            logger.debug("ignoring webhook event type=%s id=%s", event.type, event.id)
