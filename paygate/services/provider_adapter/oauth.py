"""PayPal OAuth2 client-credentials token lifecycle.

Tokens are cached per `(client_id, client_secret, base_url)` until shortly
before they expire. A per-key lock makes concurrent callers share a single
refresh instead of each hitting the token endpoint.
"""

import asyncio
import base64
import time
from dataclasses import dataclass

import httpx

from paygate.common.config import GatewaySettings
from paygate.common.errors import AuthError
from paygate.common.logging import logger
from paygate.common.metrics import paypal_token_requests_total
from paygate.services.provider_adapter.base import Provider, decode_json, send_request
from paygate.services.provider_adapter.schemas import PayPalTokenResponse


@dataclass(frozen=True)
class AccessToken:
    value: str
    acquired_at: float
    expires_at: float

    def is_fresh(self, now: float, skew_seconds: float) -> bool:
        return now < self.expires_at - skew_seconds


class PayPalTokenManager:
    """Obtains bearer tokens for PayPal API calls."""

    def __init__(self, settings: GatewaySettings, http: httpx.AsyncClient, clock=time.monotonic) -> None:
        self.settings = settings
        self.http = http
        self._clock = clock
        self._tokens: dict[tuple[str, str, str], AccessToken] = {}
        self._locks: dict[tuple[str, str, str], asyncio.Lock] = {}

    def _key(self) -> tuple[str, str, str]:
        return (
            self.settings.paypal_client_id or "",
            self.settings.paypal_client_secret or "",
            self.settings.paypal_base_url,
        )

    def _cached(self, key: tuple[str, str, str]) -> AccessToken | None:
        token = self._tokens.get(key)
        if token is not None and token.is_fresh(self._clock(), self.settings.paypal_token_expiry_skew_seconds):
            return token
        return None

    async def acquire_token(self) -> str:
        """Return a usable bearer token, exchanging credentials when needed."""

        if not self.settings.paypal_configured:
            raise AuthError("PayPal auth failed: client credentials are not configured")

        if not self.settings.paypal_token_cache_enabled:
            return (await self._exchange()).value

        key = self._key()
        token = self._cached(key)
        if token is not None:
            paypal_token_requests_total.labels(source="cache").inc()
            return token.value

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another task may have refreshed while this one waited.
            token = self._cached(key)
            if token is not None:
                paypal_token_requests_total.labels(source="cache").inc()
                return token.value
            token = await self._exchange()
            self._tokens[key] = token
            return token.value

    def invalidate(self) -> None:
        """Drop the cached token so the next call re-authenticates."""

        self._tokens.pop(self._key(), None)

    async def _exchange(self) -> AccessToken:
        credentials = f"{self.settings.paypal_client_id}:{self.settings.paypal_client_secret}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        paypal_token_requests_total.labels(source="upstream").inc()
        try:
            response = await send_request(
                self.http,
                Provider.PAYPAL,
                "oauth_token",
                "POST",
                f"{self.settings.paypal_base_url}/v1/oauth2/token",
                headers={
                    "Authorization": f"Basic {encoded}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                content="grant_type=client_credentials",
            )
        except httpx.HTTPError as exc:
            logger.error("paypal token exchange transport error: %s", exc)
            raise AuthError(f"PayPal auth failed: {exc}") from exc

        payload = decode_json(response)
        try:
            parsed = PayPalTokenResponse.model_validate(payload if isinstance(payload, dict) else {})
        except ValueError as exc:
            logger.error("paypal token exchange returned unexpected payload status=%s", response.status_code)
            raise AuthError("PayPal auth failed: Unknown error", details=payload) from exc
        if not response.is_success or not parsed.access_token:
            description = parsed.error_description or "Unknown error"
            logger.error(
                "paypal token exchange failed status=%s description=%s",
                response.status_code,
                description,
            )
            raise AuthError(f"PayPal auth failed: {description}", details=payload)

        now = self._clock()
        ttl = parsed.expires_in or self.settings.paypal_token_default_ttl_seconds
        return AccessToken(value=parsed.access_token, acquired_at=now, expires_at=now + ttl)
