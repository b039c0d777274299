"""Inbound SSLCommerz notification and validation result models."""

from decimal import Decimal
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from ..utils.sanitize import absint, sanitize_form
from .errors import ErrorCode

BASE_CURRENCY = "BDT"


class InboundNotification(BaseModel):
    """Sanitised form payload of a landing request or IPN push.

    Untrusted until the validation client has confirmed it against the
    SSLCommerz validation API.
    """

    model_config = ConfigDict(frozen=True)

    data: dict[str, str | list[str]] = Field(default_factory=dict)

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "InboundNotification":
        """Sanitise a raw form mapping into a notification."""
        return cls(data=sanitize_form(form))

    def get(self, key: str) -> str | None:
        """Return a scalar field, or None when absent or a list."""
        value = self.data.get(key)
        return value if isinstance(value, str) else None

    def has(self, key: str) -> bool:
        """True when the key was delivered, even if empty."""
        return key in self.data

    @property
    def tran_id(self) -> str:
        return self.get("tran_id") or ""

    @property
    def val_id(self) -> str:
        return self.get("val_id") or ""

    @property
    def status(self) -> str:
        return self.get("status") or ""

    @property
    def currency(self) -> str:
        return self.get("currency") or BASE_CURRENCY

    @property
    def amount(self) -> Decimal:
        """Claimed amount; 0 when missing or unparsable."""
        return to_decimal(self.get("amount")) or Decimal("0")

    @property
    def bank_tran_id(self) -> str | None:
        return self.get("bank_tran_id")

    @property
    def order_id(self) -> int:
        """Order correlation id carried in value_a; 0 means invalid."""
        return absint(self.get("value_a"))


class ValidationResult(BaseModel):
    """Outcome of querying the SSLCommerz validation API.

    confirmed is True only when the processor reported VALID or VALIDATED
    and transaction id and amount both matched the notification.
    """

    model_config = ConfigDict(frozen=True)

    confirmed: bool
    status: str | None = Field(default=None, description="Processor status")
    tran_id: str | None = None
    amount: Decimal | None = Field(default=None, description="Amount in BDT")
    currency_amount: Decimal | None = Field(
        default=None, description="Amount in the payer's currency"
    )
    currency: str | None = None
    bank_tran_id: str | None = None
    error_code: ErrorCode | None = None
    reason: str | None = None

    @classmethod
    def rejected(
        cls, code: ErrorCode, reason: str, **fields: Any
    ) -> "ValidationResult":
        """Build a negative result."""
        return cls(confirmed=False, error_code=code, reason=reason, **fields)


def to_decimal(value: Any) -> Decimal | None:
    """Parse a finite Decimal from a string or number, else None."""
    if value is None or value == "":
        return None
    try:
        number = Decimal(str(value).strip())
    except ArithmeticError:
        return None
    return number if number.is_finite() else None
