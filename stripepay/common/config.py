"""Environment-driven settings for the gateway process.

Loaded once at startup and treated as read-only afterwards (see
`.env.example`).
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed, immutable view of runtime configuration."""

    service_name: str = "stripepay-gateway"
    log_level: str = "INFO"
    # Only payment-intent calls need the key; an unset key fails those calls, not startup.
    stripe_secret_key: SecretStr = SecretStr("")
    stripe_api_version: str = "2024-06-20"
    stripe_webhook_secret: SecretStr = SecretStr("")
    webhook_tolerance_seconds: int = 300
    allow_unsigned_webhooks: bool = True
    # Comma-separated; empty means every origin is allowed.
    allowed_origins: str = ""
    host: str = "0.0.0.0"
    port: int = 8787
    otel_exporter_otlp_endpoint: str = ""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def origin_allowlist(self) -> frozenset[str]:
        return frozenset(origin.strip() for origin in self.allowed_origins.split(",") if origin.strip())


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, with optional explicit overrides."""

    return Settings(**overrides)
