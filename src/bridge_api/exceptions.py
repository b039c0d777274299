"""FastAPI exception handlers for converting GatewayError to HTTP responses.

Only the checkout endpoint lets a GatewayError escape; the callback
endpoints always acknowledge with 200 so SSLCommerz does not treat a
rejected notification as a delivery failure.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: invalid notification or payment data
- 404 Not Found: order not found
- 500 Internal Server Error: unexpected faults
- 502 Bad Gateway: SSLCommerz rejected or could not be reached
- 503 Service Unavailable: gateway settings missing or incomplete

Usage:
    from bridge_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from sslcommerz_bridge.models.errors import ErrorCode, GatewayError
from sslcommerz_bridge.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Client input -> 400
    ErrorCode.INVALID_NOTIFICATION: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PAYMENT_DATA: HTTP_400_BAD_REQUEST,
    ErrorCode.HASH_MISMATCH: HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Processor side -> 502
    ErrorCode.VALIDATION_REJECTED: HTTP_502_BAD_GATEWAY,
    ErrorCode.TRANSPORT_FAILURE: HTTP_502_BAD_GATEWAY,
    ErrorCode.INITIATION_FAILED: HTTP_502_BAD_GATEWAY,
    # Configuration -> 503
    ErrorCode.GATEWAY_NOT_CONFIGURED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CREDENTIALS_INCOMPLETE: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Convert a GatewayError to its ErrorResponse JSON body.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The GatewayError exception

    Returns:
        JSONResponse with error details and the mapped status code.
    """
    status_code = get_http_status_for_error(exc.code)
    logger.warning(
        "%s %s failed with %s (HTTP %d)",
        request.method,
        request.url.path,
        exc.code.value,
        status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content=exc.to_error_response().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(GatewayError, gateway_error_handler)  # type: ignore[arg-type]
