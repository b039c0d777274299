"""Checkout models for opening an SSLCommerz payment session."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """Payer details forwarded to SSLCommerz."""

    name: str | None = None
    email: str | None = Field(default=None, examples=["student@example.com"])
    phone_number: str | None = None


class BillingAddress(BaseModel):
    """Billing address; SSLCommerz reuses it for shipping fields."""

    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class CheckoutOrder(BaseModel):
    """Order data the host platform hands over at checkout."""

    order_id: int | None = Field(default=None, description="Tutor order ID")
    total_price: Decimal = Field(default=Decimal("0"), description="Order total")
    currency: str | None = Field(default=None, examples=["BDT"])
    customer: Customer | None = None
    billing_address: BillingAddress | None = None
    description: str | None = Field(default=None, description="Product name")


class CheckoutUrls(BaseModel):
    """Return and IPN URLs registered with each payment session."""

    model_config = ConfigDict(frozen=True)

    success_url: str
    cancel_url: str
    ipn_url: str


class InitiationResult(BaseModel):
    """A payment session SSLCommerz accepted."""

    model_config = ConfigDict(frozen=True)

    tran_id: str = Field(..., examples=["TUTOR-42-1735689600"])
    gateway_url: str = Field(..., description="GatewayPageURL to redirect the payer to")
