"""Applies a validated payment status to an order."""

from ..models.callback import StageResult
from ..models.enums import CallbackStage, OrderStatus, PaymentStatus
from ..models.errors import ErrorCode
from ..models.order import OrderUpdate
from ..utils.logging import get_logger
from .order_store import OrderStore

logger = get_logger(__name__)


class OrderReconciler:
    """Writes payment status and transaction id onto an order.

    The write is absolute (no counters, no read-modify-write), so applying
    the same (order_id, status, transaction_id) twice leaves the order as
    applying it once. The exception is `updated_at`, which records the
    latest delivery and moves on every application.
    """

    def __init__(self, store: OrderStore) -> None:
        self._store = store

    @staticmethod
    def build_update(
        payment_status: PaymentStatus, transaction_id: str
    ) -> OrderUpdate:
        """Order status becomes completed only for a paid order."""
        return OrderUpdate(
            payment_status=payment_status,
            transaction_id=transaction_id,
            order_status=(
                OrderStatus.COMPLETED if payment_status is PaymentStatus.PAID else None
            ),
        )

    def reconcile(
        self, order_id: int, payment_status: PaymentStatus, transaction_id: str
    ) -> StageResult:
        """Apply the status to the order.

        Args:
            order_id: Tutor order ID
            payment_status: Mapped payment status
            transaction_id: SSLCommerz transaction ID

        Returns:
            success when written; skipped with ORDER_NOT_FOUND when the
            order does not exist
        """
        update = self.build_update(payment_status, transaction_id)
        order = self._store.update_order(order_id, update)
        if order is None:
            logger.warning(
                "Order %s not found while reconciling %s", order_id, transaction_id
            )
            return StageResult.skipped(CallbackStage.RECONCILED, ErrorCode.ORDER_NOT_FOUND)

        logger.info(
            "Order %s reconciled: %s",
            order_id,
            " ".join(f"{key}={value}" for key, value in update.to_attributes().items()),
        )
        return StageResult.success(CallbackStage.RECONCILED)
