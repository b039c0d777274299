"""Order model for Tutor LMS orders paid through SSLCommerz."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import OrderStatus, PaymentStatus


class Order(BaseModel):
    """A Tutor order as held by the order store.

    Orders are created at checkout by the host platform; this package only
    changes payment status, transaction id and order status.
    """

    model_config = ConfigDict(use_enum_values=False)

    order_id: int = Field(..., gt=0, description="Tutor order ID")
    # The host platform has statuses of its own (e.g. trash, unpaid); those
    # stay plain strings
    payment_status: PaymentStatus | str = Field(
        default=PaymentStatus.PENDING,
        union_mode="left_to_right",
        description="Payment status",
    )
    order_status: OrderStatus | str = Field(
        default=OrderStatus.INCOMPLETE,
        union_mode="left_to_right",
        description="Fulfilment status",
    )
    transaction_id: str | None = Field(
        default=None,
        description="SSLCommerz transaction ID (tran_id)",
        examples=["TUTOR-42-1735689600"],
    )
    updated_at: datetime | None = Field(
        default=None, description="Last reconciliation timestamp"
    )


class OrderUpdate(BaseModel):
    """Partial update applied to an order by the reconciler.

    order_status is only present when the payment became paid.
    """

    model_config = ConfigDict(frozen=True)

    payment_status: PaymentStatus
    transaction_id: str
    order_status: OrderStatus | None = None

    def to_attributes(self) -> dict[str, str]:
        """Return the fields to write, skipping unset order_status."""
        attrs = {
            "payment_status": self.payment_status.value,
            "transaction_id": self.transaction_id,
        }
        if self.order_status is not None:
            attrs["order_status"] = self.order_status.value
        return attrs
