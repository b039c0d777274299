"""Services for the SSLCommerz bridge."""

from .callback_handler import CallbackHandler
from .dynamodb import DynamoDBService, get_dynamodb_service, reset_dynamodb_service
from .hash_verifier import build_hash_string, verify_hash
from .order_reconciler import OrderReconciler
from .order_store import DynamoDBOrderStore, OrderStore
from .payment_initiator import PaymentInitiator, build_payment_data
from .settings_service import GatewaySettingsService
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .status_mapper import map_processor_status
from .validation_client import ValidationClient

__all__ = [
    "CallbackHandler",
    "DynamoDBOrderStore",
    "DynamoDBService",
    "GatewaySettingsService",
    "OrderReconciler",
    "OrderStore",
    "PaymentInitiator",
    "SSMService",
    "SSMServiceError",
    "ValidationClient",
    "build_hash_string",
    "build_payment_data",
    "get_dynamodb_service",
    "get_ssm_service",
    "map_processor_status",
    "reset_dynamodb_service",
    "verify_hash",
]
