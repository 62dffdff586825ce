"""Settings defaults, derived flags and immutability."""

import logging

import pytest
from pydantic import ValidationError

from conftest import make_settings
from paygate.common.config import GatewaySettings
from paygate.common.startup import _safe_value, log_startup_config


def test_defaults_point_at_sandbox():
    settings = GatewaySettings(_env_file=None)

    assert settings.paypal_base_url == "https://api-m.sandbox.paypal.com"
    assert settings.paypal_mode == "SANDBOX"
    assert settings.paypal_default_currency == "USD"
    assert settings.port == 5000


def test_live_mode_detected_from_base_url():
    assert make_settings(paypal_base_url="https://api-m.paypal.com").paypal_mode == "LIVE"


def test_configured_flags():
    settings = make_settings(paypal_client_secret=None)

    assert settings.paystack_configured is True
    assert settings.paypal_configured is False


def test_settings_are_frozen():
    settings = make_settings()

    with pytest.raises(ValidationError):
        settings.paystack_secret_key = "sk_live_other"


def test_secrets_are_redacted():
    assert _safe_value("paystack_secret_key", "sk_test_123") == "<redacted>"
    assert _safe_value("paypal_client_secret", "abc") == "<redacted>"
    assert _safe_value("paypal_client_secret", None) == "<unset>"
    assert _safe_value("port", 5000) == "5000"


def test_startup_warns_about_missing_credentials(caplog):
    settings = make_settings(paystack_secret_key=None, paypal_client_id=None)

    with caplog.at_level(logging.WARNING, logger="paygate"):
        log_startup_config(settings)

    messages = [record.getMessage() for record in caplog.records]
    assert any("paystack secret key is missing" in m for m in messages)
    assert any("paypal credentials are missing" in m for m in messages)
    assert not any("sk_test_123" in m for m in messages)
