"""Correlation IDs for landing requests, IPNs and checkout calls.

SSLCommerz does not send a correlation header, so callbacks usually get a
fresh ID. Checkout calls from the storefront may pass their own.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from sslcommerz_bridge.utils.logging import clear_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds one correlation ID per request and returns it as a header."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(CORRELATION_ID_HEADER, "").strip()
        correlation_id = set_correlation_id(incoming or None)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
