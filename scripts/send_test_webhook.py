"""Sign and POST a Stripe-style webhook event to a running gateway.

Useful for exercising `/webhook` locally without the Stripe CLI.
"""

import argparse
import hashlib
import hmac
import json
import time
from pathlib import Path
from uuid import uuid4

import httpx


def build_event(event_type: str, failure_message: str | None, order_id: str | None) -> dict:
    """Return a minimal `payment_intent.*` event envelope."""

    intent = {"id": f"pi_{uuid4().hex[:24]}", "object": "payment_intent", "metadata": {}}
    if order_id:
        intent["metadata"]["orderId"] = order_id
    if failure_message:
        intent["last_payment_error"] = {"message": failure_message}
    return {
        "id": f"evt_{uuid4().hex[:24]}",
        "object": "event",
        "type": event_type,
        "data": {"object": intent},
    }


def sign_payload(payload: str, secret: str, timestamp: int | None = None) -> str:
    """Build a `stripe-signature` header value (`t=<ts>,v1=<hex hmac>`)."""

    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def main() -> None:
    """Parse CLI args, sign one event and print the gateway's answer."""

    parser = argparse.ArgumentParser(description="Send a signed webhook event to the gateway.")
    parser.add_argument("--url", default="http://localhost:8787/webhook")
    parser.add_argument("--secret", default="", help="Signing secret; omit to send unsigned")
    parser.add_argument("--type", dest="event_type", default="payment_intent.succeeded")
    parser.add_argument("--failure-message", default=None)
    parser.add_argument("--order-id", default=None)
    parser.add_argument("--file", dest="json_file", default=None, help="Send this JSON file instead")
    args = parser.parse_args()

    if args.json_file:
        payload = Path(args.json_file).read_text()
    else:
        payload = json.dumps(build_event(args.event_type, args.failure_message, args.order_id))

    headers = {"content-type": "application/json"}
    if args.secret:
        headers["stripe-signature"] = sign_payload(payload, args.secret)

    resp = httpx.post(args.url, content=payload, headers=headers, timeout=5.0)
    print(f"status={resp.status_code} body={resp.text}")


if __name__ == "__main__":
    main()
