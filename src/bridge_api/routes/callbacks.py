"""Callback endpoints for SSLCommerz.

Provides endpoints for:
- The success landing request (payer redirected back from SSLCommerz)
- Instant Payment Notifications (server-to-server push)

These endpoints do NOT require authentication. Inbound data is untrusted
until the validation API confirms it, and every outcome is acknowledged
with 200; SSLCommerz redelivers IPNs it considers undelivered.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from bridge_api.dependencies import get_callback_handler
from sslcommerz_bridge.models.callback import CallbackResult
from sslcommerz_bridge.services.callback_handler import CallbackHandler
from sslcommerz_bridge.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["callbacks"])


# === Response Models ===


class CallbackResponse(BaseModel):
    """Acknowledgement returned for every landing request and IPN."""

    received: bool = True
    processing_result: str  # "success", "skipped", "error"
    stage: str
    message: str | None = None

    @classmethod
    def from_result(cls, result: CallbackResult) -> "CallbackResponse":
        return cls(
            processing_result=result.result.value,
            stage=result.stage.value,
            message=result.message,
        )


# === Helper Functions ===


async def _read_form(request: Request) -> dict[str, Any]:
    """Read the form body; repeated keys become lists, uploads are dropped."""
    try:
        form = await request.form()
    except Exception as e:
        logger.warning("Unreadable callback body: %s", type(e).__name__)
        return {}

    data: dict[str, Any] = {}
    for key in form.keys():
        values = [value for value in form.getlist(key) if isinstance(value, str)]
        if not values:
            continue
        data[key] = values[0] if len(values) == 1 else values
    return data


def _read_query(request: Request) -> dict[str, Any]:
    params = request.query_params
    return {
        key: (values[0] if len(values) == 1 else values)
        for key in params.keys()
        if (values := params.getlist(key))
    }


# === Callback Endpoints ===


@router.post(
    "/payments/sslcommerz/landing",
    summary="Receive the SSLCommerz success landing request",
    description="""
Landing endpoint SSLCommerz redirects the payer to after checkout.

Only `landing_mode=success` is processed: the notification is checked
against its signature and the SSLCommerz validation API before the order
is updated. Other landing modes are acknowledged without side effects.

**Always returns 200**; the body reports how far processing got.
""",
    response_model=CallbackResponse,
    responses={
        200: {
            "description": "Landing request received and processed (or ignored)",
            "model": CallbackResponse,
        },
    },
)
async def handle_landing(
    request: Request,
    handler: CallbackHandler = Depends(get_callback_handler),
) -> CallbackResponse:
    """Run the callback pipeline for a landing request."""
    form = await _read_form(request)
    result = handler.handle_landing(_read_query(request), form)
    return CallbackResponse.from_result(result)


@router.post(
    "/webhooks/sslcommerz",
    summary="Receive SSLCommerz IPN notifications",
    description="""
Instant Payment Notification endpoint. Processed exactly like a success
landing request, without the landing-mode gate.

**Always returns 200**; the body reports how far processing got.
""",
    response_model=CallbackResponse,
    responses={
        200: {
            "description": "Notification received and processed (or acknowledged)",
            "model": CallbackResponse,
        },
    },
)
async def handle_ipn(
    request: Request,
    handler: CallbackHandler = Depends(get_callback_handler),
) -> CallbackResponse:
    """Run the callback pipeline for an IPN push."""
    form = await _read_form(request)
    result = handler.handle_notification(form)
    return CallbackResponse.from_result(result)
