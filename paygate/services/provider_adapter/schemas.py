"""Typed views of provider response payloads.

Each upstream body is validated here at the adapter boundary. Unknown fields
are kept (`extra="allow"`), so the raw payload can still be passed through.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PaystackEnvelope(BaseModel):
    """Common `{status, message, data}` wrapper of every Paystack response."""

    model_config = ConfigDict(extra="allow")

    status: bool = False
    message: str | None = None
    # Shape varies on rejections (object, list or null).
    data: Any = None


class PayPalTokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    error: str | None = None
    error_description: str | None = None


class PayPalLink(BaseModel):
    model_config = ConfigDict(extra="allow")

    href: str
    rel: str
    method: str | None = None


class PayPalOrder(BaseModel):
    """Order resource returned by create, capture and show-order-details."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    links: list[PayPalLink] = []
    payer: dict[str, Any] | None = None
    purchase_units: list[dict[str, Any]] | None = None
    create_time: str | None = None
    update_time: str | None = None

    def approval_url(self) -> str | None:
        for link in self.links:
            if link.rel == "approve":
                return link.href
        return None
