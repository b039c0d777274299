"""Mapping from SSLCommerz status codes to order payment statuses."""

from ..models.enums import PaymentStatus

STATUS_MAP: dict[str, PaymentStatus] = {
    "VALID": PaymentStatus.PAID,
    "VALIDATED": PaymentStatus.PAID,
    "FAILED": PaymentStatus.FAILED,
    "CANCELLED": PaymentStatus.CANCELLED,
    "PENDING": PaymentStatus.PENDING,
}

# Statuses the validation API uses for a settled transaction
CONFIRMED_STATUSES = frozenset({"VALID", "VALIDATED"})


def map_processor_status(processor_status: str | None) -> PaymentStatus:
    """Map a processor status to a payment status; unknown means failed."""
    if processor_status is None:
        return PaymentStatus.FAILED
    return STATUS_MAP.get(processor_status, PaymentStatus.FAILED)
