"""PayPal Orders v2 adapter: create order, payer approves on PayPal, capture.

Every call authenticates through `PayPalTokenManager` first. The order status
string PayPal returns is passed to callers as-is; the local intent status only
mirrors it.
"""

from typing import Any
from urllib.parse import quote

import httpx

from paygate.common.config import GatewaySettings
from paygate.common.errors import InternalError, UpstreamError, ValidationError
from paygate.common.logging import logger, reference_ctx
from paygate.common.state_machine import PaymentStatus
from paygate.services.provider_adapter.base import PaymentIntent, Provider, ProviderAdapter, decode_json
from paygate.services.provider_adapter.oauth import PayPalTokenManager
from paygate.services.provider_adapter.schemas import PayPalOrder

ORDER_STATUS_MAP: dict[str, PaymentStatus] = {
    "CREATED": PaymentStatus.PENDING,
    "SAVED": PaymentStatus.PENDING,
    "PAYER_ACTION_REQUIRED": PaymentStatus.PENDING,
    "APPROVED": PaymentStatus.APPROVED,
    "COMPLETED": PaymentStatus.CAPTURED,
    "VOIDED": PaymentStatus.FAILED,
}


def intent_status(order_status: str | None) -> PaymentStatus:
    return ORDER_STATUS_MAP.get(order_status or "", PaymentStatus.PENDING)


def format_amount(amount: Any) -> str:
    """Render an amount as PayPal's decimal string; whole floats drop the `.0`."""

    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


class PayPalAdapter(ProviderAdapter):
    """Two-phase provider behind OAuth2 client-credentials auth."""

    provider = Provider.PAYPAL

    def __init__(self, settings: GatewaySettings, http: httpx.AsyncClient, tokens: PayPalTokenManager) -> None:
        super().__init__(settings, http)
        self.tokens = tokens

    async def _call(self, operation: str, method: str, path: str, rejection: str, **kwargs) -> PayPalOrder:
        """Authenticate, call one Orders endpoint and parse the order it returns."""

        token = await self.tokens.acquire_token()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            response = await self._send(
                operation,
                method,
                f"{self.settings.paypal_base_url}{path}",
                headers=headers,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            logger.error("paypal %s transport error: %s", operation, exc)
            raise InternalError(f"PayPal {operation} request failed: {exc}") from exc

        payload = decode_json(response)
        if not response.is_success:
            if response.status_code == 401:
                self.tokens.invalidate()
            details = payload if payload is not None else response.text
            logger.error("paypal %s rejected status=%s payload=%s", operation, response.status_code, details)
            raise UpstreamError(rejection, details=details)

        try:
            return PayPalOrder.model_validate(payload)
        except ValueError as exc:
            logger.error("paypal %s returned unexpected payload=%s", operation, payload)
            raise InternalError(f"Unexpected PayPal {operation} response") from exc

    async def create_order(self, intent: PaymentIntent) -> dict[str, Any]:
        if not intent.amount or not intent.return_url or not intent.cancel_url:
            raise ValidationError("Amount, returnUrl, and cancelUrl are required")

        currency = intent.currency or self.settings.paypal_default_currency
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {"amount": {"currency_code": currency, "value": format_amount(intent.amount)}},
            ],
            "application_context": {
                "brand_name": self.settings.paypal_brand_name,
                "landing_page": "BILLING",
                "user_action": "PAY_NOW",
                "return_url": intent.return_url,
                "cancel_url": intent.cancel_url,
            },
        }
        order = await self._call(
            "create_order", "POST", "/v2/checkout/orders", "PayPal order creation failed", json=body
        )

        approval_url = order.approval_url()
        if approval_url is None:
            logger.error("paypal order %s has no approve link", order.id)
            raise InternalError("No approval URL found in PayPal response")

        intent.assign_reference(order.id)
        intent.advance(intent_status(order.status))
        reference_ctx.set(order.id)
        logger.info("paypal order created status=%s", order.status)
        return {"orderId": order.id, "approvalUrl": approval_url, "status": order.status}

    async def capture(self, order_id: str) -> dict[str, Any]:
        """Capture an approved order. Not deduplicated: each call reaches PayPal."""

        if not order_id:
            raise ValidationError("Order ID is required")
        reference_ctx.set(order_id)
        order = await self._call(
            "capture_order",
            "POST",
            f"/v2/checkout/orders/{quote(order_id, safe='')}/capture",
            "PayPal capture failed",
        )

        logger.info(
            "paypal order captured status=%s intent_status=%s",
            order.status,
            intent_status(order.status).value,
        )
        return {
            "success": True,
            "orderId": order.id,
            "status": order.status,
            "payer": order.payer,
            "purchase_units": order.purchase_units,
        }

    async def verify_by_id(self, order_id: str) -> dict[str, Any]:
        """Read order details. Safe to repeat; nothing changes upstream."""

        if not order_id:
            raise ValidationError("Order ID is required")
        reference_ctx.set(order_id)
        order = await self._call(
            "get_order",
            "GET",
            f"/v2/checkout/orders/{quote(order_id, safe='')}",
            "PayPal verification failed",
        )
        return {
            "orderId": order.id,
            "status": order.status,
            "create_time": order.create_time,
            "update_time": order.update_time,
            "payer": order.payer,
            "purchase_units": order.purchase_units,
        }

    async def initiate(self, intent: PaymentIntent) -> dict[str, Any]:
        return await self.create_order(intent)

    async def verify(self, reference: str) -> dict[str, Any]:
        return await self.verify_by_id(reference)
