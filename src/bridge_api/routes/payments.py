"""Payment endpoints for opening SSLCommerz sessions.

Provides REST endpoints for:
- Creating a payment session for a Tutor checkout order

The caller redirects the payer to the returned gateway URL; the outcome
arrives later through the landing and IPN endpoints.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from bridge_api.dependencies import get_payment_initiator
from sslcommerz_bridge.models.checkout import CheckoutOrder, InitiationResult
from sslcommerz_bridge.models.errors import ErrorResponse
from sslcommerz_bridge.services.payment_initiator import PaymentInitiator

router = APIRouter(tags=["payments"])


@router.post(
    "/payments/sslcommerz/checkout",
    summary="Create SSLCommerz payment session",
    description="""
Open an SSLCommerz payment session for an order.

The order id is sent to SSLCommerz in `value_a` and comes back with every
landing request and IPN for this session.

**Notes:**
- Amount is formatted to two decimals
- Missing customer and billing fields are filled with placeholders
- Store credentials are read from the payment settings parameter
""",
    response_description="Transaction id and gateway URL",
    response_model=InitiationResult,
    status_code=HTTP_201_CREATED,
    responses={
        201: {"description": "Payment session created"},
        400: {"description": "Invalid payment data", "model": ErrorResponse},
        502: {"description": "SSLCommerz rejected the session", "model": ErrorResponse},
        503: {"description": "Gateway not configured", "model": ErrorResponse},
    },
)
async def create_checkout(
    body: CheckoutOrder,
    initiator: PaymentInitiator = Depends(get_payment_initiator),
) -> InitiationResult:
    """Create a payment session and return its gateway URL."""
    return initiator.create_payment(body)
