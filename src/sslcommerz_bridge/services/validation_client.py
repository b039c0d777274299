"""Client for the SSLCommerz transaction validation API.

The validation API is the authoritative record of a transaction. A
notification is only trusted when the API reports it VALID or VALIDATED
and the transaction id and amount both agree with what the notification
claims.

Usage:
    client = ValidationClient(credentials)
    result = client.validate(notification)
    if result.confirmed:
        ...
"""

from decimal import Decimal
from urllib.parse import quote_plus

import httpx

from ..models.credentials import ClientCredentials
from ..models.errors import ErrorCode, TransportError
from ..models.notification import (
    BASE_CURRENCY,
    InboundNotification,
    ValidationResult,
    to_decimal,
)
from ..utils.logging import get_logger
from .hash_verifier import md5_hex, verify_hash
from .status_mapper import CONFIRMED_STATUSES

logger = get_logger(__name__)

VALIDATION_ENDPOINT = "/validator/api/validationserverAPI.php"
VALIDATION_TIMEOUT_SECONDS = 30.0
AMOUNT_TOLERANCE = Decimal("1")


def build_http_client(
    credentials: ClientCredentials,
    *,
    timeout: float,
    transport: httpx.BaseTransport | None = None,
    follow_redirects: bool = False,
) -> httpx.Client:
    """Create an httpx client with the environment's TLS policy.

    Args:
        credentials: Merchant credentials (decides TLS verification)
        timeout: Request timeout in seconds
        transport: Optional transport override (tests)
        follow_redirects: Whether to follow redirects

    Returns:
        A new httpx.Client; callers close it.
    """
    return httpx.Client(
        verify=credentials.verify_tls,
        timeout=timeout,
        transport=transport,
        follow_redirects=follow_redirects,
    )


class ValidationClient:
    """Confirms notifications against the SSLCommerz validation API."""

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        timeout: float = VALIDATION_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Merchant credentials
            timeout: Request timeout in seconds
            transport: Optional httpx transport override (tests)
        """
        self._credentials = credentials
        self._timeout = timeout
        self._transport = transport

    def validation_url(self, val_id: str) -> str:
        """Build the validation URL; each query value is encoded on its own.

        The URL carries the store password and must not be logged.
        """
        creds = self._credentials
        return (
            f"{creds.api_domain}{VALIDATION_ENDPOINT}"
            f"?val_id={quote_plus(val_id)}"
            f"&store_id={quote_plus(creds.store_id)}"
            f"&store_passwd={quote_plus(creds.store_password.get_secret_value())}"
            "&v=1&format=json"
        )

    def validate(self, notification: InboundNotification) -> ValidationResult:
        """Verify the signature, then confirm the transaction with SSLCommerz.

        Args:
            notification: Sanitised inbound notification

        Returns:
            ValidationResult; confirmed is False for any mismatch.

        Raises:
            TransportError: On timeout, connection or TLS failure.
        """
        tran_id = notification.tran_id
        if not tran_id or not notification.val_id:
            return ValidationResult.rejected(
                ErrorCode.INVALID_NOTIFICATION,
                "Missing tran_id or val_id",
            )

        password_hash = md5_hex(self._credentials.store_password.get_secret_value())
        if not verify_hash(notification.data, password_hash):
            logger.warning("Signature mismatch for transaction %s", tran_id)
            return ValidationResult.rejected(
                ErrorCode.HASH_MISMATCH, "verify_sign does not match"
            )

        logger.info(
            "Validating transaction %s with SSLCommerz (%s)",
            tran_id,
            self._credentials.environment.value,
        )
        try:
            with build_http_client(
                self._credentials, timeout=self._timeout, transport=self._transport
            ) as client:
                response = client.get(self.validation_url(notification.val_id))
        except httpx.HTTPError as e:
            logger.warning(
                "Validation request failed for %s: %s", tran_id, type(e).__name__
            )
            raise TransportError(type(e).__name__) from e

        return self._evaluate(notification, response)

    def _evaluate(
        self, notification: InboundNotification, response: httpx.Response
    ) -> ValidationResult:
        """Compare the validation API response with the notification."""
        if response.status_code != 200 or not response.content.strip():
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, f"HTTP {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError:
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, "Invalid JSON response"
            )
        if not isinstance(body, dict):
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, "Unexpected response shape"
            )

        status = body.get("status")
        status = str(status) if status is not None else None
        confirmed_tran_id = str(body.get("tran_id") or "").strip()
        fields = {
            "status": status,
            "tran_id": confirmed_tran_id or None,
            "amount": to_decimal(body.get("amount")),
            "currency_amount": to_decimal(body.get("currency_amount")),
            "currency": _optional_str(body.get("currency_type") or body.get("currency")),
            "bank_tran_id": _optional_str(body.get("bank_tran_id")),
        }

        if status not in CONFIRMED_STATUSES:
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, f"Processor status {status}", **fields
            )

        if notification.tran_id.strip() != confirmed_tran_id:
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, "Transaction id mismatch", **fields
            )

        # BDT notifications compare against amount, others against the
        # amount in the payer's currency
        if notification.currency == BASE_CURRENCY:
            confirmed_amount = fields["amount"]
        else:
            confirmed_amount = fields["currency_amount"]
        if confirmed_amount is None:
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, "Missing confirmed amount", **fields
            )
        if abs(notification.amount - confirmed_amount) >= AMOUNT_TOLERANCE:
            return ValidationResult.rejected(
                ErrorCode.VALIDATION_REJECTED, "Amount mismatch", **fields
            )

        return ValidationResult(confirmed=True, **fields)


def _optional_str(value: object) -> str | None:
    return str(value) if value not in (None, "") else None
