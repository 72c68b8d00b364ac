"""Request, response and webhook event schemas for the gateway."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaymentIntentRequest(BaseModel):
    """Payload accepted by `POST /create-payment-intent`.

    Amount and currency are deliberately loose here so the handler can answer
    with its own `Invalid amount` / `Unsupported currency` errors.
    """

    model_config = ConfigDict(populate_by_name=True)

    amount_in_cents: Any = Field(default=None, alias="amountInCents")
    currency: Any = "usd"
    metadata: dict[str, Any] | None = None


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(alias="clientSecret")


class WebhookEvent(BaseModel):
    """Stripe event envelope.

    Fields are untyped on purpose: a verified event is acknowledged whatever
    shape it has, and the accessors below fall back to empty values.
    """

    model_config = ConfigDict(extra="allow")

    id: Any = None
    type: Any = None
    data: Any = None

    @property
    def event_type(self) -> str:
        return self.type if isinstance(self.type, str) else ""

    @property
    def data_object(self) -> dict[str, Any]:
        obj = self.data.get("object") if isinstance(self.data, dict) else None
        return obj if isinstance(obj, dict) else {}
