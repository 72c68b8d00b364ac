"""Public HTTP surface for payment-intent creation and Stripe webhooks.

Requests pass an origin allow-list before anything else, then reach one of
two stateless handlers that call Stripe.
"""

from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from stripepay.common.config import Settings, load_settings
from stripepay.common.logging import configure_logging, logger, request_id_ctx
from stripepay.common.metrics import (
    cors_rejections_total,
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from stripepay.common.startup import log_startup_config
from stripepay.common.tracing import instrument_app, setup_tracing
from stripepay.services.gateway.processor import (
    IntentCreated,
    PaymentProcessor,
    StripeProcessor,
    WebhookVerificationError,
)
from stripepay.services.gateway.schemas import PaymentIntentRequest, PaymentIntentResponse
from stripepay.services.gateway.service import GatewayService, PaymentRequestError


def origin_allowed(origin: str | None, allowlist: frozenset[str]) -> bool:
    """No Origin header, an empty allow-list, or a listed origin passes."""

    return not origin or not allowlist or origin in allowlist


def create_app(settings: Settings, processor: PaymentProcessor | None = None) -> FastAPI:
    """Build the gateway app around one immutable settings object."""

    if processor is None:
        processor = StripeProcessor(
            api_key=settings.stripe_secret_key.get_secret_value(),
            api_version=settings.stripe_api_version,
            webhook_tolerance=settings.webhook_tolerance_seconds,
        )
    service = GatewayService(settings, processor)
    allowlist = settings.origin_allowlist
    if not settings.stripe_webhook_secret.get_secret_value() and settings.allow_unsigned_webhooks:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; webhook bodies will be accepted without signature checks")

    app = FastAPI(title="Stripe Payments Gateway")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(allowlist) or ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def origin_gate(request: Request, call_next):
        """Refuse cross-origin callers outside the configured allow-list."""

        origin = request.headers.get("origin")
        if not origin_allowed(origin, allowlist):
            cors_rejections_total.labels(service=settings.service_name).inc()
            logger.warning("origin rejected origin=%s path=%s", origin, request.url.path)
            return JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
        return await call_next(request)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency for every HTTP call."""

        request_id_ctx.set(
            request.headers.get("x-request-id") or request.headers.get("x-correlation-id") or str(uuid4())
        )
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.exception_handler(RequestValidationError)
    async def invalid_body(_: Request, exc: RequestValidationError):
        logger.info("rejected request body errors=%s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.post("/create-payment-intent", response_model=PaymentIntentResponse)
    async def create_payment_intent(req: PaymentIntentRequest):
        """Validate amount/currency and return the new intent's client secret."""

        try:
            result = await service.create_payment_intent(req)
        except PaymentRequestError as exc:
            return JSONResponse(status_code=400, content={"error": str(exc)})
        if isinstance(result, IntentCreated):
            return PaymentIntentResponse(client_secret=result.client_secret)
        return JSONResponse(status_code=500, content={"error": "Server error"})

    @app.post("/webhook")
    async def webhook(request: Request, stripe_signature: str | None = Header(default=None)):
        """Verify, dispatch and acknowledge one Stripe event."""

        payload = await request.body()
        try:
            event = service.parse_event(payload, stripe_signature)
        except WebhookVerificationError as exc:
            return PlainTextResponse(f"Webhook Error: {exc}", status_code=400)
        service.dispatch_event(event)
        return {"received": True}

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Stripe backend OK"

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    instrument_app(app)
    return app


settings = load_settings()
configure_logging(settings.service_name, settings.log_level)
setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
log_startup_config(settings)
app = create_app(settings)


def run() -> None:
    """Serve the gateway with uvicorn on the configured port."""

    logger.info("Server listening on :%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
