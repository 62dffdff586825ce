"""API request/response schemas for gateway endpoints.

Request fields are optional at the schema level. Presence checks happen in the
orchestrator, so a missing field gets the endpoint's own 400 message instead
of a generic validation error.
"""

from pydantic import BaseModel, ConfigDict, Field


class PaystackPayRequest(BaseModel):
    """Payload accepted by `POST /api/paystack/pay`."""

    email: str | None = None
    # Minor currency unit (kobo, pesewas, cents).
    amount: int | float | str | None = None
    currency: str | None = None


class PayPalCreateOrderRequest(BaseModel):
    """Payload accepted by `POST /api/paypal/create-order`."""

    model_config = ConfigDict(populate_by_name=True)

    # Decimal major-unit value, e.g. "10.00".
    amount: str | int | float | None = None
    currency: str | None = None
    return_url: str | None = Field(default=None, alias="returnUrl")
    cancel_url: str | None = Field(default=None, alias="cancelUrl")


class PayPalCaptureRequest(BaseModel):
    """Payload accepted by `POST /api/paypal/capture-order`."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str | None = Field(default=None, alias="orderId")


class ServiceFlags(BaseModel):
    paystack: bool
    paypal: bool


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    services: ServiceFlags
