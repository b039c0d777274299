"""Opening SSLCommerz payment sessions for Tutor orders.

The order id travels to SSLCommerz in value_a and comes back in every
landing request and IPN, since the processor has no dedicated field for it.
"""

import os
import time
from decimal import ROUND_HALF_UP, Decimal

import httpx

from ..models.checkout import CheckoutOrder, CheckoutUrls, InitiationResult
from ..models.credentials import ClientCredentials
from ..models.errors import ErrorCode, GatewayError, PaymentInitiationError
from ..models.notification import BASE_CURRENCY
from ..utils.logging import get_logger, log_payment_operation
from .validation_client import build_http_client

logger = get_logger(__name__)

PROCESS_ENDPOINT = "/gwprocess/v4/api.php"
INITIATION_TIMEOUT_SECONDS = 60.0

TRANSACTION_PREFIX = "TUTOR-"
PRODUCT_CATEGORY = "education"
PRODUCT_PROFILE = "non-physical-goods"
SHIPPING_METHOD = "NO"
DEFAULT_COUNTRY = "Bangladesh"
DEFAULT_PHONE = "01700000000"
DEFAULT_POSTCODE = "0000"
DEFAULT_STORE_NAME = "Tutor LMS"
NOT_AVAILABLE = "N/A"


def format_amount(amount: Decimal) -> str:
    """Format an amount with two decimals, rounding half up."""
    return str(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_payment_data(
    order: CheckoutOrder,
    urls: CheckoutUrls,
    *,
    store_name: str = DEFAULT_STORE_NAME,
    now: int | None = None,
) -> dict[str, str]:
    """Build the SSLCommerz session form for an order.

    Args:
        order: Checkout order from the host platform
        urls: Success, cancel and IPN URLs
        store_name: Store name sent in value_c
        now: Unix timestamp for the transaction id (defaults to current time)

    Returns:
        Form fields without store credentials

    Raises:
        GatewayError: INVALID_PAYMENT_DATA if a required field is missing
    """
    if not order.order_id:
        raise GatewayError(ErrorCode.INVALID_PAYMENT_DATA, details={"field": "order_id"})
    if not order.currency:
        raise GatewayError(ErrorCode.INVALID_PAYMENT_DATA, details={"field": "currency"})
    if order.customer is None or not order.customer.email:
        raise GatewayError(
            ErrorCode.INVALID_PAYMENT_DATA, details={"field": "customer.email"}
        )
    if order.total_price <= 0:
        raise GatewayError(
            ErrorCode.INVALID_PAYMENT_DATA, details={"field": "total_price"}
        )

    timestamp = int(time.time()) if now is None else now
    amount = format_amount(order.total_price)
    customer = order.customer
    billing = order.billing_address
    default_country = DEFAULT_COUNTRY if order.currency == BASE_CURRENCY else NOT_AVAILABLE

    name = customer.name or "Customer"
    address1 = (billing.address1 if billing else None) or NOT_AVAILABLE
    address2 = (billing.address2 if billing else None) or ""
    city = (billing.city if billing else None) or NOT_AVAILABLE
    state = (billing.state if billing else None) or ""
    postcode = (billing.postal_code if billing else None) or DEFAULT_POSTCODE
    country = (billing.country if billing else None) or default_country

    return {
        "total_amount": amount,
        "currency": order.currency,
        "tran_id": f"{TRANSACTION_PREFIX}{order.order_id}-{timestamp}",
        "product_category": PRODUCT_CATEGORY,
        "product_name": order.description or "Course Purchase",
        "product_profile": PRODUCT_PROFILE,
        "success_url": urls.success_url,
        "fail_url": urls.cancel_url,
        "cancel_url": urls.cancel_url,
        "ipn_url": urls.ipn_url,
        "cus_name": name,
        "cus_email": customer.email,
        "cus_add1": address1,
        "cus_add2": address2,
        "cus_city": city,
        "cus_state": state,
        "cus_postcode": postcode,
        "cus_country": country,
        "cus_phone": customer.phone_number or DEFAULT_PHONE,
        "shipping_method": SHIPPING_METHOD,
        "num_of_item": "1",
        "ship_name": name,
        "ship_add1": address1,
        "ship_add2": address2,
        "ship_city": city,
        "ship_state": state,
        "ship_postcode": postcode,
        "ship_country": country,
        "value_a": str(order.order_id),
        "value_b": customer.email,
        "value_c": store_name,
        "product_amount": amount,
    }


def checkout_urls_from_env() -> CheckoutUrls:
    """Read return and IPN URLs from the environment.

    Raises:
        GatewayError: GATEWAY_NOT_CONFIGURED if any URL is unset
    """
    values = {
        "success_url": os.environ.get("SSLCOMMERZ_SUCCESS_URL", ""),
        "cancel_url": os.environ.get("SSLCOMMERZ_CANCEL_URL", ""),
        "ipn_url": os.environ.get("SSLCOMMERZ_IPN_URL", ""),
    }
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise GatewayError(
            ErrorCode.GATEWAY_NOT_CONFIGURED, details={"missing": ",".join(missing)}
        )
    return CheckoutUrls(**values)


class PaymentInitiator:
    """Creates SSLCommerz payment sessions.

    Usage:
        initiator = PaymentInitiator(credentials, urls)
        result = initiator.create_payment(order)
        # redirect the payer to result.gateway_url
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        urls: CheckoutUrls,
        *,
        store_name: str | None = None,
        timeout: float = INITIATION_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._urls = urls
        self._store_name = store_name or os.environ.get(
            "SSLCOMMERZ_STORE_NAME", DEFAULT_STORE_NAME
        )
        self._timeout = timeout
        self._transport = transport

    def create_payment(self, order: CheckoutOrder) -> InitiationResult:
        """Open a payment session and return the gateway page URL.

        Args:
            order: Checkout order

        Returns:
            InitiationResult with tran_id and GatewayPageURL

        Raises:
            GatewayError: If the order data is invalid
            PaymentInitiationError: If SSLCommerz rejects or cannot be reached
        """
        data = build_payment_data(order, self._urls, store_name=self._store_name)
        tran_id = data["tran_id"]
        form = dict(data)
        form["store_id"] = self._credentials.store_id
        form["store_passwd"] = self._credentials.store_password.get_secret_value()

        log_payment_operation(
            logger,
            "create_payment",
            order_id=order.order_id,
            tran_id=tran_id,
            amount=data["total_amount"],
            currency=data["currency"],
        )

        try:
            with build_http_client(
                self._credentials,
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = client.post(
                    f"{self._credentials.api_domain}{PROCESS_ENDPOINT}", data=form
                )
        except httpx.HTTPError as e:
            reason = f"Failed to connect with SSLCommerz API: {type(e).__name__}"
            log_payment_operation(
                logger, "create_payment", order_id=order.order_id, tran_id=tran_id, error=reason
            )
            raise PaymentInitiationError(reason) from e

        body = self._parse(response)
        gateway_url = body.get("GatewayPageURL")
        if body.get("status") != "SUCCESS":
            reason = str(body.get("failedreason") or "Unknown error occurred")
            log_payment_operation(
                logger, "create_payment", order_id=order.order_id, tran_id=tran_id, error=reason
            )
            raise PaymentInitiationError(reason)
        if not gateway_url:
            reason = "Gateway URL not found in response"
            log_payment_operation(
                logger, "create_payment", order_id=order.order_id, tran_id=tran_id, error=reason
            )
            raise PaymentInitiationError(reason)

        log_payment_operation(
            logger,
            "create_payment",
            order_id=order.order_id,
            tran_id=tran_id,
            status="SUCCESS",
        )
        return InitiationResult(tran_id=tran_id, gateway_url=str(gateway_url))

    @staticmethod
    def _parse(response: httpx.Response) -> dict:
        """Decode the session response; failures become a FAILED body."""
        if response.status_code != 200 or not response.content.strip():
            return {
                "status": "FAILED",
                "failedreason": f"Failed to connect with SSLCommerz API (HTTP {response.status_code})",
            }
        try:
            body = response.json()
        except ValueError:
            return {"status": "FAILED", "failedreason": "Invalid JSON response from SSLCommerz API"}
        if not isinstance(body, dict):
            return {"status": "FAILED", "failedreason": "Invalid JSON response from SSLCommerz API"}
        return body
