"""Pydantic models for the SSLCommerz bridge."""

from .callback import CallbackResult, StageResult
from .checkout import (
    BillingAddress,
    CheckoutOrder,
    CheckoutUrls,
    Customer,
    InitiationResult,
)
from .credentials import (
    ClientCredentials,
    PaymentMethodSettings,
    PaymentSettings,
    SettingsField,
)
from .enums import (
    CallbackStage,
    Environment,
    LandingMode,
    OrderStatus,
    PaymentStatus,
    ProcessingResult,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    CredentialsError,
    ErrorCode,
    ErrorResponse,
    GatewayError,
    PaymentInitiationError,
    TransportError,
)
from .notification import InboundNotification, ValidationResult
from .order import Order, OrderUpdate

__all__ = [
    # Enums
    "CallbackStage",
    "Environment",
    "LandingMode",
    "OrderStatus",
    "PaymentStatus",
    "ProcessingResult",
    # Callback pipeline
    "CallbackResult",
    "InboundNotification",
    "StageResult",
    "ValidationResult",
    # Settings
    "ClientCredentials",
    "PaymentMethodSettings",
    "PaymentSettings",
    "SettingsField",
    # Orders
    "Order",
    "OrderUpdate",
    # Checkout
    "BillingAddress",
    "CheckoutOrder",
    "CheckoutUrls",
    "Customer",
    "InitiationResult",
    # Errors
    "CredentialsError",
    "ErrorCode",
    "ErrorResponse",
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "GatewayError",
    "PaymentInitiationError",
    "TransportError",
]
