"""Pytest configuration and fixtures for the SSLCommerz bridge tests.

This module provides reusable fixtures for testing:
- DynamoDB and SSM mocking with moto
- Gateway settings and credentials
- Sample SSLCommerz notifications and validation API responses
- httpx.MockTransport stand-ins for the SSLCommerz API
"""

import json
import os
from typing import Any, Callable, Generator

import boto3
import httpx
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-tutor")
os.environ.setdefault("PAYMENT_SETTINGS_PARAMETER", "/tutor/test/payment_settings")
os.environ.setdefault("SSLCOMMERZ_SUCCESS_URL", "https://lms.example.com/api/payments/sslcommerz/landing?landing_mode=success")
os.environ.setdefault("SSLCOMMERZ_CANCEL_URL", "https://lms.example.com/api/payments/sslcommerz/landing?landing_mode=cancel")
os.environ.setdefault("SSLCOMMERZ_IPN_URL", "https://lms.example.com/api/webhooks/sslcommerz")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


# === Test Configuration ===

TEST_STORE_ID = "tutor6789abcd"
TEST_STORE_PASSWORD = "tutor6789abcd@ssl"
TEST_ORDER_ID = 42
TEST_TRAN_ID = "TUTOR-42-1735689600"
TEST_VAL_ID = "2501011200001abcDEFghi"
ORDERS_TABLE = "test-tutor-orders"


# === Singleton Resets ===


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Tests using mock_aws get fresh boto3 clients inside the mock context
    rather than reusing ones created by a previous test.
    """
    from bridge_api.dependencies import reset_services

    monkeypatch.delenv("SSLCOMMERZ_WRITE_BACK_FAILURES", raising=False)
    reset_services()
    yield
    reset_services()


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def aws(aws_credentials: None) -> Generator[None, None, None]:
    """Run the test inside a moto mock_aws context."""
    with mock_aws():
        yield


@pytest.fixture
def orders_table(aws: None) -> Any:
    """Create the orders table and return its boto3 Table resource."""
    client = boto3.client("dynamodb", region_name="eu-west-1")
    client.create_table(
        TableName=ORDERS_TABLE,
        KeySchema=[{"AttributeName": "order_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "order_id", "AttributeType": "N"}],
        BillingMode="PAY_PER_REQUEST",
    )
    return boto3.resource("dynamodb", region_name="eu-west-1").Table(ORDERS_TABLE)


@pytest.fixture
def existing_order(orders_table: Any) -> dict[str, Any]:
    """Insert an unpaid order for TEST_ORDER_ID."""
    item = {
        "order_id": TEST_ORDER_ID,
        "payment_status": "pending",
        "order_status": "incomplete",
    }
    orders_table.put_item(Item=item)
    return item


def settings_document(**overrides: str | None) -> dict[str, Any]:
    """Build a payment settings document with an sslcommerz block.

    Pass a field name with None to leave it out.
    """
    values: dict[str, str | None] = {
        "environment": "sandbox",
        "store_id": TEST_STORE_ID,
        "store_password": TEST_STORE_PASSWORD,
        "webhook_url": "https://lms.example.com/api/webhooks/sslcommerz",
    }
    values.update(overrides)
    return {
        "payment_methods": [
            {"name": "paypal", "fields": [{"name": "client_id", "value": "pp"}]},
            {
                "name": "sslcommerz",
                "fields": [
                    {"name": name, "value": value}
                    for name, value in values.items()
                    if value is not None
                ],
            },
        ]
    }


@pytest.fixture
def payment_settings_parameter(aws: None) -> str:
    """Store a valid settings document in mocked SSM."""
    name = os.environ["PAYMENT_SETTINGS_PARAMETER"]
    boto3.client("ssm", region_name="eu-west-1").put_parameter(
        Name=name,
        Value=json.dumps(settings_document()),
        Type="SecureString",
    )
    return name


# === Credentials and Notifications ===


@pytest.fixture
def sandbox_credentials():
    """Sandbox ClientCredentials for the test store."""
    from sslcommerz_bridge.models.credentials import ClientCredentials

    return ClientCredentials.from_fields(
        {
            "environment": "sandbox",
            "store_id": TEST_STORE_ID,
            "store_password": TEST_STORE_PASSWORD,
        }
    )


@pytest.fixture
def notification_form() -> dict[str, str]:
    """Form body of a successful BDT payment as SSLCommerz posts it."""
    return {
        "tran_id": TEST_TRAN_ID,
        "val_id": TEST_VAL_ID,
        "amount": "500.00",
        "card_type": "VISA-Dutch Bangla",
        "store_amount": "487.50",
        "bank_tran_id": "250101120000Y4t6uFr1KxXzU0s",
        "status": "VALID",
        "tran_date": "2025-01-01 12:00:00",
        "currency": "BDT",
        "value_a": str(TEST_ORDER_ID),
        "value_b": "student@example.com",
        "value_c": "Tutor LMS",
    }


def validation_body(**overrides: Any) -> dict[str, Any]:
    """Validation API response confirming the sample notification."""
    body: dict[str, Any] = {
        "status": "VALID",
        "tran_date": "2025-01-01 12:00:00",
        "tran_id": TEST_TRAN_ID,
        "val_id": TEST_VAL_ID,
        "amount": "500.00",
        "store_amount": "487.50",
        "currency": "BDT",
        "bank_tran_id": "250101120000Y4t6uFr1KxXzU0s",
        "card_type": "VISA-Dutch Bangla",
        "currency_type": "BDT",
        "currency_amount": "500.00",
        "value_a": str(TEST_ORDER_ID),
    }
    body.update(overrides)
    return body


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)


@pytest.fixture
def sslcommerz_api() -> Callable[..., RecordingTransport]:
    """Factory for a transport answering with a fixed JSON body.

    Usage:
        transport = sslcommerz_api(validation_body())
        transport = sslcommerz_api(raw=b"oops", status_code=500)
        transport = sslcommerz_api(error=httpx.ConnectTimeout("timed out"))
    """

    def factory(
        body: Any = None,
        *,
        status_code: int = 200,
        raw: bytes | None = None,
        error: Exception | None = None,
    ) -> RecordingTransport:
        def responder(request: httpx.Request) -> httpx.Response:
            if error is not None:
                raise error
            if raw is not None:
                return httpx.Response(status_code, content=raw)
            return httpx.Response(status_code, json=body)

        return RecordingTransport(responder)

    return factory


@pytest.fixture
def make_settings_document() -> Callable[..., dict[str, Any]]:
    """Builder for payment settings documents."""
    return settings_document


@pytest.fixture
def make_validation_body() -> Callable[..., dict[str, Any]]:
    """Builder for validation API responses."""
    return validation_body
