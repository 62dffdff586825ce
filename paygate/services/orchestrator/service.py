"""Orchestrator logic.

Validates inbound requests, selects the provider adapter and runs exactly one
adapter operation per request. Adapter results pass through unchanged. No
state is kept between requests apart from the adapters' shared token cache.
"""

from datetime import datetime, timezone
from typing import Any

import httpx

from paygate.common.config import GatewaySettings
from paygate.common.errors import ValidationError
from paygate.common.logging import provider_ctx
from paygate.services.orchestrator.schemas import (
    HealthResponse,
    PayPalCaptureRequest,
    PayPalCreateOrderRequest,
    PaystackPayRequest,
    ServiceFlags,
)
from paygate.services.provider_adapter.base import PaymentIntent, Provider
from paygate.services.provider_adapter.oauth import PayPalTokenManager
from paygate.services.provider_adapter.paypal import PayPalAdapter
from paygate.services.provider_adapter.paystack import PaystackAdapter


class PaymentOrchestrator:
    """Single entry point the HTTP layer uses for every payment operation."""

    def __init__(self, settings: GatewaySettings, paystack: PaystackAdapter, paypal: PayPalAdapter) -> None:
        self.settings = settings
        self.paystack = paystack
        self.paypal = paypal

    @classmethod
    def from_settings(cls, settings: GatewaySettings, http: httpx.AsyncClient) -> "PaymentOrchestrator":
        tokens = PayPalTokenManager(settings, http)
        return cls(
            settings,
            paystack=PaystackAdapter(settings, http),
            paypal=PayPalAdapter(settings, http, tokens),
        )

    async def pay_with_paystack(self, req: PaystackPayRequest) -> dict[str, Any]:
        provider_ctx.set(Provider.PAYSTACK.value)
        if not req.email or not req.amount:
            raise ValidationError("Email and amount are required")
        intent = PaymentIntent(
            provider=Provider.PAYSTACK,
            amount=req.amount,
            currency=req.currency,
            identity=req.email,
        )
        return await self.paystack.initiate(intent)

    async def verify_paystack(self, reference: str) -> dict[str, Any]:
        provider_ctx.set(Provider.PAYSTACK.value)
        return await self.paystack.verify(reference)

    async def create_paypal_order(self, req: PayPalCreateOrderRequest) -> dict[str, Any]:
        provider_ctx.set(Provider.PAYPAL.value)
        # Checked before any token is requested.
        if not req.amount or not req.return_url or not req.cancel_url:
            raise ValidationError("Amount, returnUrl, and cancelUrl are required")
        intent = PaymentIntent(
            provider=Provider.PAYPAL,
            amount=req.amount,
            currency=req.currency or self.settings.paypal_default_currency,
            return_url=req.return_url,
            cancel_url=req.cancel_url,
        )
        return await self.paypal.create_order(intent)

    async def capture_paypal_order(self, req: PayPalCaptureRequest) -> dict[str, Any]:
        provider_ctx.set(Provider.PAYPAL.value)
        if not req.order_id:
            raise ValidationError("Order ID is required")
        return await self.paypal.capture(req.order_id)

    async def verify_paypal_order(self, order_id: str) -> dict[str, Any]:
        provider_ctx.set(Provider.PAYPAL.value)
        return await self.paypal.verify_by_id(order_id)

    def health(self) -> HealthResponse:
        """Report configuration presence only; credentials are not checked upstream."""

        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return HealthResponse(
            status="OK",
            timestamp=timestamp,
            services=ServiceFlags(
                paystack=self.settings.paystack_configured,
                paypal=self.settings.paypal_configured,
            ),
        )
