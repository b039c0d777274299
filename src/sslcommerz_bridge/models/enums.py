"""Enumeration types for SSLCommerz bridge data models."""

from enum import Enum


class Environment(str, Enum):
    """SSLCommerz account environment."""

    SANDBOX = "sandbox"
    LIVE = "live"


class PaymentStatus(str, Enum):
    """Payment status of a Tutor order."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class OrderStatus(str, Enum):
    """Fulfilment status of a Tutor order."""

    INCOMPLETE = "incomplete"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LandingMode(str, Enum):
    """Landing variant SSLCommerz redirects the payer back with."""

    SUCCESS = "success"
    FAIL = "fail"
    CANCEL = "cancel"


class ProcessingResult(str, Enum):
    """Outcome of a pipeline stage or a whole callback delivery."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class CallbackStage(str, Enum):
    """States of the callback pipeline, in order."""

    RECEIVED = "received"
    FILTERED = "filtered"
    EXTRACTED = "extracted"
    CREDENTIALS_RESOLVED = "credentials_resolved"
    VERIFIED = "verified"
    VALIDATED = "validated"
    RECONCILED = "reconciled"
    DONE = "done"
