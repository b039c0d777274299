"""FastAPI dependency injection providers for bridge services.

Services are lazily instantiated and cached with @lru_cache, so one Lambda
container reuses its boto3 clients and SSM cache across invocations.

Usage in routes:
    from bridge_api.dependencies import get_callback_handler

    @router.post("/webhooks/sslcommerz")
    async def ipn(handler: CallbackHandler = Depends(get_callback_handler)):
        ...

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        └── DynamoDBOrderStore
                └── OrderReconciler ──┐
    SSMService (singleton)            ├── CallbackHandler
        └── GatewaySettingsService ───┘
                └── PaymentInitiator (per request, fresh credentials)

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from sslcommerz_bridge.services.callback_handler import CallbackHandler
from sslcommerz_bridge.services.dynamodb import get_dynamodb_service
from sslcommerz_bridge.services.order_reconciler import OrderReconciler
from sslcommerz_bridge.services.order_store import DynamoDBOrderStore
from sslcommerz_bridge.services.payment_initiator import (
    PaymentInitiator,
    checkout_urls_from_env,
)
from sslcommerz_bridge.services.settings_service import GatewaySettingsService


@lru_cache
def get_settings_service() -> GatewaySettingsService:
    """Get cached GatewaySettingsService instance."""
    return GatewaySettingsService()


@lru_cache
def get_order_store() -> DynamoDBOrderStore:
    """Get cached DynamoDBOrderStore on the DynamoDB singleton."""
    return DynamoDBOrderStore(db=get_dynamodb_service())


@lru_cache
def get_order_reconciler() -> OrderReconciler:
    """Get cached OrderReconciler instance."""
    return OrderReconciler(store=get_order_store())


@lru_cache
def get_callback_handler() -> CallbackHandler:
    """Get cached CallbackHandler instance.

    Returns:
        CallbackHandler wired to the settings service and reconciler.
    """
    return CallbackHandler(
        settings=get_settings_service(),
        reconciler=get_order_reconciler(),
    )


def get_payment_initiator() -> PaymentInitiator:
    """Build a PaymentInitiator with the current credentials.

    Not cached: credentials are resolved per request so a settings change
    takes effect once the SSM cache is cleared.

    Raises:
        GatewayError: If the gateway or its URLs are not configured.
    """
    credentials = get_settings_service().get_credentials()
    return PaymentInitiator(credentials, checkout_urls_from_env())


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying DynamoDB and SSM singletons.
    """
    from sslcommerz_bridge.services.dynamodb import reset_dynamodb_service
    from sslcommerz_bridge.services.ssm_service import reset_ssm_service

    get_settings_service.cache_clear()
    get_order_store.cache_clear()
    get_order_reconciler.cache_clear()
    get_callback_handler.cache_clear()

    reset_dynamodb_service()
    reset_ssm_service()
