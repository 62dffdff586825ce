"""Paystack adapter: initialize a transaction, then verify it by reference."""

from typing import Any
from urllib.parse import quote

import httpx

from paygate.common.errors import InternalError, UpstreamError, ValidationError
from paygate.common.logging import logger, reference_ctx
from paygate.common.state_machine import PaymentStatus
from paygate.services.provider_adapter.base import PaymentIntent, Provider, ProviderAdapter, decode_json
from paygate.services.provider_adapter.schemas import PaystackEnvelope


class PaystackAdapter(ProviderAdapter):
    """Single-step provider. The payer completes checkout on Paystack's page."""

    provider = Provider.PAYSTACK

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.paystack_secret_key or ''}"}

    async def initiate(self, intent: PaymentIntent) -> dict[str, Any]:
        """Initialize a transaction and return Paystack's payload unchanged.

        `amount` is forwarded as given, in the currency's minor unit.
        """

        if not intent.identity or not intent.amount:
            raise ValidationError("Email and amount are required")

        body: dict[str, Any] = {
            "email": intent.identity,
            "amount": intent.amount,
            "callback_url": self.settings.paystack_callback_url,
        }
        if intent.currency:
            body["currency"] = intent.currency

        try:
            response = await self._send(
                "initialize",
                "POST",
                f"{self.settings.paystack_base_url}/transaction/initialize",
                headers=self._headers(),
                json=body,
            )
        except httpx.HTTPError as exc:
            logger.error("paystack initialize transport error: %s", exc)
            raise InternalError("Payment initialization failed") from exc

        payload = decode_json(response)
        try:
            envelope = PaystackEnvelope.model_validate(payload)
        except ValueError as exc:
            logger.error("paystack initialize unreadable payload status=%s", response.status_code)
            raise InternalError("Payment initialization failed") from exc

        if not envelope.status:
            logger.error("paystack initialize rejected payload=%s", payload)
            raise UpstreamError("Payment initialization failed", details=payload)

        reference = envelope.data.get("reference") if isinstance(envelope.data, dict) else None
        if reference:
            intent.assign_reference(reference)
            reference_ctx.set(reference)
        logger.info("paystack transaction initialized status=%s", intent.status.value)
        return payload

    async def verify(self, reference: str) -> dict[str, Any]:
        """Report `success` or `failed` for a reference.

        A failed payment is a normal result, not an error. Only transport or
        parse failures raise.
        """

        reference_ctx.set(reference)
        try:
            response = await self._send(
                "verify",
                "GET",
                f"{self.settings.paystack_base_url}/transaction/verify/{quote(reference, safe='')}",
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.error("paystack verify transport error: %s", exc)
            raise UpstreamError("Verification failed", status_code=500) from exc

        payload = decode_json(response)
        if payload is None:
            logger.error("paystack verify returned non-JSON body status=%s", response.status_code)
            raise UpstreamError("Verification failed", status_code=500)

        data = payload.get("data") if isinstance(payload, dict) else None
        upstream_status = data.get("status") if isinstance(data, dict) else None

        intent = PaymentIntent(provider=self.provider, external_reference=reference)
        intent.advance(PaymentStatus.SUCCEEDED if upstream_status == "success" else PaymentStatus.FAILED)
        logger.info("paystack verification upstream_status=%s status=%s", upstream_status, intent.status.value)

        return {
            "data": {
                "status": "success" if intent.status is PaymentStatus.SUCCEEDED else "failed",
                "reference": reference,
            }
        }
