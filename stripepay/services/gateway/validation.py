"""Input rules for payment-intent requests."""

import json
from collections.abc import Mapping
from typing import Any

# $500,000 in minor units.
MAX_AMOUNT_CENTS = 500_000_000

SUPPORTED_CURRENCIES: frozenset[str] = frozenset({"usd", "cad", "eur", "gbp", "aud"})


def is_valid_amount(value: Any) -> bool:
    """Accept integers in `1..MAX_AMOUNT_CENTS`.

    A float with no fractional part (JSON `2500.0`) counts as an integer;
    booleans never do.
    """

    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        if not value.is_integer():
            return False
    elif not isinstance(value, int):
        return False
    return 0 < value <= MAX_AMOUNT_CENTS


def is_valid_currency(code: str) -> bool:
    return code.lower() in SUPPORTED_CURRENCIES


def stringify_value(value: Any) -> str:
    """Render any JSON-ish value as the string Stripe stores in metadata."""

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def coerce_metadata(metadata: Mapping[str, Any] | None) -> dict[str, str]:
    """Stringify every metadata entry; `None` becomes an empty mapping."""

    if not metadata:
        return {}
    return {str(key): stringify_value(value) for key, value in metadata.items()}
