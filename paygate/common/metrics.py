"""Prometheus metric definitions for the gateway and its provider adapters."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
provider_requests_total = Counter(
    "provider_requests_total",
    "Outbound calls to payment providers by outcome",
    ["provider", "operation", "outcome"],
)
provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Outbound payment provider call latency seconds",
    ["provider", "operation"],
)
paypal_token_requests_total = Counter(
    "paypal_token_requests_total",
    "PayPal access token lookups by source",
    ["source"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
