"""Order store backed by DynamoDB.

Orders are owned by the host platform. The bridge reads them and applies
partial updates keyed by order id; every update is a single conditional
UpdateItem, so concurrent duplicate deliveries converge on the same item.
"""

import datetime as dt
from typing import TYPE_CHECKING, Any, Protocol

from ..models.order import Order, OrderUpdate

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService


class OrderStore(Protocol):
    """Narrow contract the reconciler needs from order storage."""

    def get_order(self, order_id: int) -> Order | None: ...

    def update_order(self, order_id: int, update: OrderUpdate) -> Order | None: ...


class DynamoDBOrderStore:
    """OrderStore implementation on the `orders` table."""

    ORDERS_TABLE = "orders"

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize the store.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def get_order(self, order_id: int) -> Order | None:
        """Fetch an order by id, or None if it does not exist."""
        item = self.db.get_item(self.ORDERS_TABLE, {"order_id": order_id})
        return _item_to_order(item) if item else None

    def update_order(self, order_id: int, update: OrderUpdate) -> Order | None:
        """Apply a partial update to an existing order.

        Args:
            order_id: Tutor order ID
            update: Fields to set

        Returns:
            The updated order, or None if no order has this id
        """
        values: dict[str, Any] = dict(update.to_attributes())
        values["updated_at"] = dt.datetime.now(dt.UTC).isoformat()

        attrs = self.db.update_existing(self.ORDERS_TABLE, {"order_id": order_id}, values)
        return _item_to_order(attrs) if attrs else None


def _item_to_order(item: dict[str, Any]) -> Order:
    data = dict(item)
    # DynamoDB numbers come back as Decimal
    data["order_id"] = int(data["order_id"])
    return Order.model_validate(data)
