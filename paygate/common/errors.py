"""Error taxonomy shared by provider adapters and the orchestrator.

Adapters raise these; the HTTP layer turns every one of them into a single
`{error, details?, message?}` envelope through `error_response`.
"""

from typing import Any

from fastapi.responses import JSONResponse


class PaymentGatewayError(Exception):
    """Base class for every failure surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, details: Any = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PaymentGatewayError):
    """A required request field is missing or malformed. No network call was made."""

    status_code = 400


class UpstreamError(PaymentGatewayError):
    """The provider rejected the request or reported a business failure."""

    status_code = 400


class AuthError(PaymentGatewayError):
    """Credential exchange with the OAuth provider failed."""

    status_code = 500
    public_message = "PayPal authentication failed"


class InternalError(PaymentGatewayError):
    """Unexpected or contract-violating upstream response."""

    status_code = 500


def error_response(exc: Exception, failure_label: str, expose_details: bool = True) -> JSONResponse:
    """Map one exception onto the normalized error envelope and HTTP status.

    `failure_label` is the route's generic failure text, used for 5xx
    responses. 4xx responses carry the error's own message.
    """

    if not isinstance(exc, PaymentGatewayError):
        return JSONResponse(status_code=500, content={"error": failure_label})

    if exc.status_code < 500:
        body: dict[str, Any] = {"error": exc.message}
        if exc.details is not None and expose_details:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)

    body = {"error": failure_label}
    if isinstance(exc, AuthError):
        body["message"] = exc.public_message
    elif isinstance(exc, InternalError):
        body["message"] = exc.message
    return JSONResponse(status_code=exc.status_code, content=body)
