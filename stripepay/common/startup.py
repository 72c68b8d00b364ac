"""Startup-time logging of the parsed settings."""

from pydantic import SecretStr

from stripepay.common.config import Settings
from stripepay.common.logging import logger


def describe_settings(settings: Settings) -> dict:
    """Return the effective settings with secret fields masked.

    Secrets are recognised by type, so a new `SecretStr` field is masked
    without touching this function.
    """

    described = settings.model_dump(mode="json")
    for name, value in settings:
        if isinstance(value, SecretStr):
            described[name] = "<redacted>" if value.get_secret_value() else "<unset>"
    return described


def log_startup_config(settings: Settings) -> None:
    """Log what the process actually runs with, defaults included."""

    logger.info("startup_config=%s", describe_settings(settings))
