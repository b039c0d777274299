"""Standard error codes for the SSLCommerz bridge.

Every failure the pipeline can observe maps to one code. Callback
endpoints only log these; the checkout endpoint returns them to the client
as an ErrorResponse.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Gateway error codes."""

    INVALID_NOTIFICATION = "ERR_GW_001"
    GATEWAY_NOT_CONFIGURED = "ERR_GW_002"
    CREDENTIALS_INCOMPLETE = "ERR_GW_003"
    HASH_MISMATCH = "ERR_GW_004"
    VALIDATION_REJECTED = "ERR_GW_005"
    TRANSPORT_FAILURE = "ERR_GW_006"
    ORDER_NOT_FOUND = "ERR_GW_007"
    INVALID_PAYMENT_DATA = "ERR_GW_008"
    INITIATION_FAILED = "ERR_GW_009"
    INTERNAL_ERROR = "ERR_GW_010"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_NOTIFICATION: "Notification is missing a transaction id or order id",
    ErrorCode.GATEWAY_NOT_CONFIGURED: "SSLCommerz gateway settings not found",
    ErrorCode.CREDENTIALS_INCOMPLETE: "SSLCommerz store credentials are incomplete",
    ErrorCode.HASH_MISMATCH: "Notification signature does not match",
    ErrorCode.VALIDATION_REJECTED: "Transaction could not be confirmed by SSLCommerz",
    ErrorCode.TRANSPORT_FAILURE: "Could not reach the SSLCommerz API",
    ErrorCode.ORDER_NOT_FOUND: "Order not found",
    ErrorCode.INVALID_PAYMENT_DATA: "Payment data is incomplete or invalid",
    ErrorCode.INITIATION_FAILED: "SSLCommerz payment session could not be created",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
}

# Recovery hints for operators
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.INVALID_NOTIFICATION: "Check that value_a carries the order id at initiation",
    ErrorCode.GATEWAY_NOT_CONFIGURED: "Add the sslcommerz block to the payment settings parameter",
    ErrorCode.CREDENTIALS_INCOMPLETE: "Set environment, store_id and store_password",
    ErrorCode.HASH_MISMATCH: "Verify the store password matches the SSLCommerz panel",
    ErrorCode.VALIDATION_REJECTED: "Inspect the transaction in the SSLCommerz merchant panel",
    ErrorCode.TRANSPORT_FAILURE: "Wait for SSLCommerz to redeliver the notification",
    ErrorCode.ORDER_NOT_FOUND: "Verify the order exists in the order store",
    ErrorCode.INVALID_PAYMENT_DATA: "Provide order id, positive amount, currency and customer email",
    ErrorCode.INITIATION_FAILED: "Try again or contact support",
    ErrorCode.INTERNAL_ERROR: "Check the logs for this correlation id",
}


class ErrorResponse(BaseModel):
    """Standard error response body."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class GatewayError(Exception):
    """Exception raised by gateway operations.

    Can be caught and converted to an ErrorResponse for API responses.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        return ErrorResponse.from_code(self.code, self.details)


class CredentialsError(GatewayError):
    """Raised when gateway settings are absent or fail schema checks."""


class TransportError(GatewayError):
    """Raised when the SSLCommerz API cannot be reached."""

    def __init__(self, reason: str) -> None:
        super().__init__(ErrorCode.TRANSPORT_FAILURE, details={"reason": reason})


class PaymentInitiationError(GatewayError):
    """Raised when SSLCommerz refuses to open a payment session."""

    def __init__(self, reason: str) -> None:
        super().__init__(ErrorCode.INITIATION_FAILED, details={"reason": reason})
