"""Provider-neutral payment intent and the adapter contract both providers implement."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any

import httpx

from paygate.common.config import GatewaySettings
from paygate.common.errors import ValidationError
from paygate.common.metrics import provider_latency_seconds, provider_requests_total
from paygate.common.state_machine import PaymentStatus, validate_transition


class Provider(str, Enum):
    PAYSTACK = "paystack"
    PAYPAL = "paypal"


@dataclass
class PaymentIntent:
    """Request-scoped description of one payment. Never persisted or shared."""

    provider: Provider
    amount: Any = None
    currency: str | None = None
    identity: str | None = None
    return_url: str | None = None
    cancel_url: str | None = None
    external_reference: str | None = None
    status: PaymentStatus = PaymentStatus.PENDING

    def assign_reference(self, reference: str) -> None:
        """Record the provider-assigned identifier; allowed exactly once."""

        if self.external_reference is not None:
            raise ValueError(f"external reference already assigned: {self.external_reference}")
        self.external_reference = reference

    def advance(self, new_status: PaymentStatus) -> None:
        validate_transition(self.status, new_status)
        self.status = new_status


async def send_request(
    http: httpx.AsyncClient,
    provider: Provider,
    operation: str,
    method: str,
    url: str,
    **kwargs,
) -> httpx.Response:
    """Issue one outbound provider call and record its latency and outcome.

    Transport failures propagate as `httpx.HTTPError` for the caller to classify.
    """

    start = perf_counter()
    outcome = "error"
    try:
        response = await http.request(method, url, **kwargs)
        outcome = "success" if response.is_success else "rejected"
        return response
    finally:
        provider_latency_seconds.labels(provider=provider.value, operation=operation).observe(
            max(0.0, perf_counter() - start)
        )
        provider_requests_total.labels(provider=provider.value, operation=operation, outcome=outcome).inc()


def decode_json(response: httpx.Response) -> Any:
    """Return the parsed body, or None when the body is not JSON."""

    try:
        return response.json()
    except ValueError:
        return None


class ProviderAdapter(ABC):
    """Maps a generic payment intent onto one provider's protocol."""

    provider: Provider

    def __init__(self, settings: GatewaySettings, http: httpx.AsyncClient) -> None:
        self.settings = settings
        self.http = http

    async def _send(self, operation: str, method: str, url: str, **kwargs) -> httpx.Response:
        return await send_request(self.http, self.provider, operation, method, url, **kwargs)

    @abstractmethod
    async def initiate(self, intent: PaymentIntent) -> dict[str, Any]:
        """Start a payment with the provider and assign its external reference."""

    @abstractmethod
    async def verify(self, reference: str) -> dict[str, Any]:
        """Read the provider's current view of a payment. Must not mutate it."""

    async def capture(self, reference: str) -> dict[str, Any]:
        raise ValidationError(f"{self.provider.value} does not support capture")
