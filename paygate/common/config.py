"""Central environment-driven settings for the payment gateway.

The process builds one `GatewaySettings` at startup and hands the same object
to every component. Values are frozen after construction; nothing re-reads the
environment mid-request (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Typed, immutable view of runtime configuration from environment variables."""

    service_name: str = "payment-gateway"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000

    paystack_secret_key: str | None = None
    paystack_base_url: str = "https://api.paystack.co"
    paystack_callback_url: str = "https://remboglow.com/"

    paypal_client_id: str | None = None
    paypal_client_secret: str | None = None
    paypal_base_url: str = "https://api-m.sandbox.paypal.com"
    paypal_brand_name: str = "Face Fit"
    paypal_default_currency: str = "USD"
    paypal_token_cache_enabled: bool = True
    paypal_token_expiry_skew_seconds: int = 60
    # Used when the token response carries no `expires_in`.
    paypal_token_default_ttl_seconds: int = 300

    http_timeout_seconds: float = 30.0
    cors_allow_origins: list[str] = ["*"]
    expose_upstream_details: bool = True

    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def paystack_configured(self) -> bool:
        return bool(self.paystack_secret_key)

    @property
    def paypal_configured(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)

    @property
    def paypal_mode(self) -> str:
        return "SANDBOX" if "sandbox" in self.paypal_base_url else "LIVE"


def load_settings(**overrides) -> GatewaySettings:
    """Build the process-wide settings object once at startup."""

    return GatewaySettings(**overrides)
