"""Startup-time helpers for safe config logging."""

from paygate.common.config import GatewaySettings
from paygate.common.logging import logger

SECRET_MARKERS = ("secret", "password")


def _safe_value(name: str, value) -> str:
    """Return a printable setting value with redaction for secret-like names."""

    if value is None:
        return "<unset>"
    if any(marker in name for marker in SECRET_MARKERS):
        return "<redacted>"
    return str(value)


def log_startup_config(settings: GatewaySettings) -> None:
    """Log redacted configuration and warn about missing provider credentials.

    Missing secrets never block startup; the affected endpoints fail at request
    time instead.
    """

    config = {name: _safe_value(name, value) for name, value in settings.model_dump().items()}
    logger.info("startup_config=%s", config)

    if not settings.paystack_configured:
        logger.warning("paystack secret key is missing; /api/paystack endpoints will fail")
    if not settings.paypal_configured:
        logger.warning("paypal credentials are missing; /api/paypal endpoints will fail")

    logger.info(
        "providers paystack=%s paypal=%s paypal_mode=%s",
        "configured" if settings.paystack_configured else "not configured",
        "configured" if settings.paypal_configured else "not configured",
        settings.paypal_mode,
    )
