"""HTTP surface of the payment gateway.

Exposes the Paystack and PayPal endpoints, `/health` and `/metrics`. Every
payment route goes through `_run`, so all of them share one error envelope and
one taxonomy-to-status mapping.
"""

from collections.abc import Awaitable
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Any
from uuid import uuid4

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paygate.common.config import GatewaySettings, load_settings
from paygate.common.errors import PaymentGatewayError, error_response
from paygate.common.logging import configure_logging, logger, trace_id_ctx
from paygate.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paygate.common.startup import log_startup_config
from paygate.common.tracing import instrument_app, setup_tracing
from paygate.services.orchestrator.schemas import (
    HealthResponse,
    PayPalCaptureRequest,
    PayPalCreateOrderRequest,
    PaystackPayRequest,
)
from paygate.services.orchestrator.service import PaymentOrchestrator

router = APIRouter()


def _orchestrator(request: Request) -> PaymentOrchestrator:
    return request.app.state.orchestrator


async def _run(request: Request, failure_label: str, operation: Awaitable[dict[str, Any]]):
    """Await one orchestrator operation and normalize any failure it raises."""

    settings: GatewaySettings = request.app.state.settings
    try:
        return await operation
    except PaymentGatewayError as exc:
        if exc.status_code < 500:
            logger.warning(
                "request rejected route=%s error=%s details=%s", request.url.path, exc.message, exc.details
            )
        else:
            logger.error("request failed route=%s error=%s details=%s", request.url.path, exc.message, exc.details)
        return error_response(exc, failure_label, settings.expose_upstream_details)
    except Exception as exc:
        logger.exception("unexpected error route=%s: %s", request.url.path, exc)
        return error_response(exc, failure_label)


@router.post("/api/paystack/pay")
async def paystack_pay(request: Request, req: PaystackPayRequest | None = None):
    """Initialize a Paystack transaction and return Paystack's payload."""

    return await _run(
        request,
        "Payment initialization failed",
        _orchestrator(request).pay_with_paystack(req or PaystackPayRequest()),
    )


@router.get("/verify/{reference}")
async def paystack_verify(request: Request, reference: str):
    """Report whether a Paystack transaction succeeded."""

    return await _run(request, "Verification failed", _orchestrator(request).verify_paystack(reference))


@router.post("/api/paypal/create-order")
async def paypal_create_order(request: Request, req: PayPalCreateOrderRequest | None = None):
    """Create a PayPal order and return the approval URL for the payer."""

    return await _run(
        request,
        "Failed to create PayPal order",
        _orchestrator(request).create_paypal_order(req or PayPalCreateOrderRequest()),
    )


@router.post("/api/paypal/capture-order")
async def paypal_capture_order(request: Request, req: PayPalCaptureRequest | None = None):
    """Capture an order the payer has approved."""

    return await _run(
        request,
        "Failed to capture PayPal payment",
        _orchestrator(request).capture_paypal_order(req or PayPalCaptureRequest()),
    )


@router.get("/api/paypal/verify/{order_id}")
async def paypal_verify(request: Request, order_id: str):
    """Fetch current PayPal order details."""

    return await _run(
        request,
        "Failed to verify PayPal payment",
        _orchestrator(request).verify_paypal_order(order_id),
    )


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    """Liveness probe; reports which providers are configured."""

    return _orchestrator(request).health()


@router.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


async def request_context_middleware(request: Request, call_next):
    """Bind a correlation id and record request count and latency for every HTTP call."""

    settings: GatewaySettings = request.app.state.settings
    trace_id = request.headers.get("x-correlation-id") or str(uuid4())
    trace_token = trace_id_ctx.set(trace_id)
    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        response.headers["x-correlation-id"] = trace_id
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()
        trace_id_ctx.reset(trace_token)


async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("invalid request body route=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def create_app(settings: GatewaySettings | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the gateway app around one immutable settings object.

    When `http_client` is given the caller owns it; otherwise the app creates
    one and closes it on shutdown.
    """

    settings = settings or load_settings()
    configure_logging(settings)
    tracing_enabled = setup_tracing(settings)
    log_startup_config(settings)

    owns_client = http_client is None
    http = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        """Close the outbound HTTP client with application lifecycle."""

        yield
        if owns_client:
            await http.aclose()

    app = FastAPI(title="Payment Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = PaymentOrchestrator.from_settings(settings, http)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_context_middleware)
    app.add_exception_handler(RequestValidationError, invalid_body_handler)
    app.include_router(router)
    if tracing_enabled:
        instrument_app(app)
    return app


def run() -> None:
    """Console entrypoint: load settings once and serve the app with uvicorn."""

    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
