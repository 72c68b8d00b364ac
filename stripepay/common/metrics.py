"""Prometheus metric definitions for the gateway."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
payment_intent_requests_total = Counter(
    "payment_intent_requests_total",
    "Payment intent requests by outcome",
    ["service", "outcome"],
)
payment_intent_latency_seconds = Histogram(
    "payment_intent_latency_seconds",
    "Latency of the Stripe create-payment-intent call",
    ["service"],
)
webhook_events_total = Counter(
    "webhook_events_total",
    "Accepted webhook events by type",
    ["service", "event_type"],
)
webhook_rejections_total = Counter(
    "webhook_rejections_total",
    "Webhook requests rejected before dispatch",
    ["service", "reason"],
)
cors_rejections_total = Counter("cors_rejections_total", "Requests refused by the origin allow-list", ["service"])


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
