"""Shared fixtures: settings, a scripted fake upstream and a test client."""

import httpx
import pytest
from fastapi.testclient import TestClient

from paygate.common.config import GatewaySettings
from paygate.services.orchestrator.main import create_app

PAYSTACK_URL = "https://paystack.test"
PAYPAL_URL = "https://paypal.test"


class FakeUpstream:
    """Scripted stand-in for both providers, served through `httpx.MockTransport`.

    Responses queued for one (method, url) are returned in order; the last one
    repeats once the queue is down to a single entry.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, status_code: int = 200, json=None, text: str | None = None) -> None:
        self.routes.setdefault((method, url), []).append(("response", status_code, json, text))

    def fail(self, method: str, url: str) -> None:
        self.routes.setdefault((method, url), []).append(("error", None, None, None))

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and _base(r.url) == url]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, _base(request.url)))
        if not queue:
            return httpx.Response(404, json={"name": "NOT_SCRIPTED"})
        kind, status_code, body, text = queue.pop(0) if len(queue) > 1 else queue[0]
        if kind == "error":
            raise httpx.ConnectError("connection refused", request=request)
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=body)


def _base(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.host}{url.path}"


def make_settings(**overrides) -> GatewaySettings:
    values = {
        "_env_file": None,
        "paystack_secret_key": "sk_test_123",
        "paystack_base_url": PAYSTACK_URL,
        "paypal_client_id": "client-id",
        "paypal_client_secret": "client-secret",
        "paypal_base_url": PAYPAL_URL,
    }
    values.update(overrides)
    return GatewaySettings(**values)


def paypal_token(upstream: FakeUpstream, token: str = "A21-token", expires_in: int = 32400) -> None:
    upstream.add(
        "POST",
        f"{PAYPAL_URL}/v1/oauth2/token",
        json={"access_token": token, "token_type": "Bearer", "expires_in": expires_in},
    )


def paypal_order(order_id: str = "5O190127TN364715T", status: str = "CREATED", links=None) -> dict:
    if links is None:
        links = [
            {"href": f"{PAYPAL_URL}/v2/checkout/orders/{order_id}", "rel": "self", "method": "GET"},
            {"href": f"https://www.paypal.test/checkoutnow?token={order_id}", "rel": "approve", "method": "GET"},
        ]
    return {"id": order_id, "status": status, "links": links}


@pytest.fixture
def settings() -> GatewaySettings:
    return make_settings()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def client(settings: GatewaySettings, http_client: httpx.AsyncClient):
    with TestClient(create_app(settings, http_client)) as test_client:
        yield test_client
