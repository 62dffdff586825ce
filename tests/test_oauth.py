"""PayPal client-credentials token exchange and caching."""

import asyncio
import base64

import pytest

from conftest import PAYPAL_URL, make_settings, paypal_token
from paygate.common.errors import AuthError
from paygate.services.provider_adapter.oauth import PayPalTokenManager

TOKEN_URL = f"{PAYPAL_URL}/v1/oauth2/token"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_exchange_uses_basic_auth_and_client_credentials(upstream, http_client, settings):
    paypal_token(upstream, token="tok-1")
    tokens = PayPalTokenManager(settings, http_client)

    assert await tokens.acquire_token() == "tok-1"

    request = upstream.calls("POST", TOKEN_URL)[0]
    expected = base64.b64encode(b"client-id:client-secret").decode("ascii")
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.content == b"grant_type=client_credentials"


@pytest.mark.asyncio
async def test_rejected_exchange_raises_auth_error_with_description(upstream, http_client, settings):
    upstream.add(
        "POST",
        TOKEN_URL,
        status_code=401,
        json={"error": "invalid_client", "error_description": "Client Authentication failed"},
    )
    tokens = PayPalTokenManager(settings, http_client)

    with pytest.raises(AuthError) as excinfo:
        await tokens.acquire_token()
    assert str(excinfo.value) == "PayPal auth failed: Client Authentication failed"


@pytest.mark.asyncio
async def test_missing_access_token_raises_auth_error(upstream, http_client, settings):
    upstream.add("POST", TOKEN_URL, json={"token_type": "Bearer"})
    tokens = PayPalTokenManager(settings, http_client)

    with pytest.raises(AuthError) as excinfo:
        await tokens.acquire_token()
    assert str(excinfo.value) == "PayPal auth failed: Unknown error"


@pytest.mark.asyncio
async def test_transport_failure_raises_auth_error(upstream, http_client, settings):
    upstream.fail("POST", TOKEN_URL)
    tokens = PayPalTokenManager(settings, http_client)

    with pytest.raises(AuthError):
        await tokens.acquire_token()


@pytest.mark.asyncio
async def test_unconfigured_credentials_fail_without_network(upstream, http_client):
    tokens = PayPalTokenManager(make_settings(paypal_client_id=None), http_client)

    with pytest.raises(AuthError):
        await tokens.acquire_token()
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_cached_token_is_reused_until_expiry(upstream, http_client, settings):
    upstream.add("POST", TOKEN_URL, json={"access_token": "tok-1", "expires_in": 600})
    upstream.add("POST", TOKEN_URL, json={"access_token": "tok-2", "expires_in": 600})
    clock = FakeClock()
    tokens = PayPalTokenManager(settings, http_client, clock=clock)

    assert await tokens.acquire_token() == "tok-1"
    clock.now += 500
    assert await tokens.acquire_token() == "tok-1"
    assert len(upstream.calls("POST", TOKEN_URL)) == 1

    # Inside the expiry skew window the token is treated as stale.
    clock.now += settings.paypal_token_expiry_skew_seconds
    assert await tokens.acquire_token() == "tok-2"
    assert len(upstream.calls("POST", TOKEN_URL)) == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(upstream, http_client, settings):
    paypal_token(upstream, token="tok-1")
    tokens = PayPalTokenManager(settings, http_client)

    results = await asyncio.gather(*(tokens.acquire_token() for _ in range(5)))

    assert results == ["tok-1"] * 5
    assert len(upstream.calls("POST", TOKEN_URL)) == 1


@pytest.mark.asyncio
async def test_cache_disabled_exchanges_every_call(upstream, http_client):
    paypal_token(upstream)
    tokens = PayPalTokenManager(make_settings(paypal_token_cache_enabled=False), http_client)

    await tokens.acquire_token()
    await tokens.acquire_token()

    assert len(upstream.calls("POST", TOKEN_URL)) == 2


@pytest.mark.asyncio
async def test_invalidate_forces_new_exchange(upstream, http_client, settings):
    paypal_token(upstream)
    tokens = PayPalTokenManager(settings, http_client)

    await tokens.acquire_token()
    tokens.invalidate()
    await tokens.acquire_token()

    assert len(upstream.calls("POST", TOKEN_URL)) == 2


@pytest.mark.asyncio
async def test_malformed_token_payload_raises_auth_error(upstream, http_client, settings):
    malformed = {"access_token": {"nested": 1}, "expires_in": "soon"}
    upstream.add("POST", TOKEN_URL, json=malformed)
    tokens = PayPalTokenManager(settings, http_client)

    with pytest.raises(AuthError) as excinfo:
        await tokens.acquire_token()
    assert str(excinfo.value) == "PayPal auth failed: Unknown error"
    assert excinfo.value.details == malformed
