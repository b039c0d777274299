"""Unit tests for the SSLCommerz callback pipeline.

Tests drive CallbackHandler with a moto-backed orders table, mocked
settings and a MockTransport standing in for the validation API.

Test categories:
- Landing gate: only the success landing reaches validation
- Extraction: malformed order ids end before any network call
- End-to-end scenarios: confirmed, failed, not found
- Failure outcomes: credentials, signature, transport, unexpected faults
- Failure write-back flag
"""

import hashlib
from unittest.mock import MagicMock

import httpx
import pytest

from sslcommerz_bridge.models.enums import (
    CallbackStage,
    OrderStatus,
    PaymentStatus,
    ProcessingResult,
)
from sslcommerz_bridge.models.errors import CredentialsError, ErrorCode
from sslcommerz_bridge.services.callback_handler import CallbackHandler
from sslcommerz_bridge.services.dynamodb import DynamoDBService
from sslcommerz_bridge.services.order_reconciler import OrderReconciler
from sslcommerz_bridge.services.order_store import DynamoDBOrderStore
from sslcommerz_bridge.services.settings_service import GatewaySettingsService
from sslcommerz_bridge.services.validation_client import ValidationClient

SUCCESS_QUERY = {"landing_mode": "success"}


# === Test Fixtures ===


@pytest.fixture
def settings(sandbox_credentials) -> MagicMock:
    """Settings service returning sandbox credentials."""
    service = MagicMock(spec=GatewaySettingsService)
    service.get_credentials.return_value = sandbox_credentials
    return service


@pytest.fixture
def store(orders_table) -> DynamoDBOrderStore:
    return DynamoDBOrderStore(DynamoDBService())


@pytest.fixture
def make_handler(settings, store):
    """Build a handler whose validation client uses the given transport."""

    def factory(transport: httpx.BaseTransport | None = None, **kwargs) -> CallbackHandler:
        return CallbackHandler(
            settings=settings,
            reconciler=OrderReconciler(store),
            validation_client_factory=lambda creds: ValidationClient(creds, transport=transport),
            **kwargs,
        )

    return factory


# === Landing Gate ===


class TestLandingGate:
    """Only the success landing reaches validation."""

    @pytest.mark.parametrize(
        "query", [{"landing_mode": "fail"}, {"landing_mode": "cancel"}, {}, {"landing_mode": ""}]
    )
    def test_non_success_landing_never_validates(
        self, query, settings, notification_form, existing_order, store
    ):
        factory = MagicMock()
        handler = CallbackHandler(
            settings=settings,
            reconciler=OrderReconciler(store),
            validation_client_factory=factory,
        )

        result = handler.handle_landing(query, notification_form)

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.FILTERED
        assert factory.call_count == 0
        settings.get_credentials.assert_not_called()
        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_landing_mode_is_sanitized(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order
    ):
        handler = make_handler(sslcommerz_api(make_validation_body()))

        result = handler.handle_landing({"landing_mode": [" success\n"]}, notification_form)

        assert result.result is ProcessingResult.SUCCESS


# === Extraction ===


class TestExtraction:
    """Malformed notifications end before any network call."""

    @pytest.mark.parametrize("value_a", ["abc", "0", "", "-0"])
    def test_invalid_order_id_exits_early(
        self, value_a, make_handler, sslcommerz_api, notification_form, settings
    ):
        transport = sslcommerz_api({})
        notification_form["value_a"] = value_a

        result = make_handler(transport).handle_landing(SUCCESS_QUERY, notification_form)

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.EXTRACTED
        assert result.error_code is ErrorCode.INVALID_NOTIFICATION
        assert transport.requests == []
        settings.get_credentials.assert_not_called()

    def test_oversized_order_id_exits_early(self, make_handler, sslcommerz_api, notification_form):
        transport = sslcommerz_api({})
        notification_form["value_a"] = "9" * 5000

        result = make_handler(transport).handle_notification(notification_form)

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.EXTRACTED
        assert result.error_code is ErrorCode.INVALID_NOTIFICATION
        assert transport.requests == []

    def test_missing_order_id_exits_early(self, make_handler, sslcommerz_api, notification_form):
        transport = sslcommerz_api({})
        del notification_form["value_a"]

        result = make_handler(transport).handle_notification(notification_form)

        assert result.stage is CallbackStage.EXTRACTED
        assert transport.requests == []

    def test_missing_transaction_id_exits_early(self, make_handler, sslcommerz_api, notification_form):
        transport = sslcommerz_api({})
        notification_form["tran_id"] = "   "

        result = make_handler(transport).handle_notification(notification_form)

        assert result.stage is CallbackStage.EXTRACTED
        assert transport.requests == []

    def test_negative_order_id_uses_absolute_value(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        notification_form["value_a"] = "-42"

        result = make_handler(sslcommerz_api(make_validation_body())).handle_notification(
            notification_form
        )

        assert result.order_id == 42
        assert store.get_order(42).payment_status is PaymentStatus.PAID


# === End-to-end Scenarios ===


class TestScenarios:
    """Full pipeline against the orders table."""

    def test_confirmed_payment_completes_order(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        transport = sslcommerz_api(make_validation_body())

        result = make_handler(transport).handle_landing(SUCCESS_QUERY, notification_form)

        assert result.result is ProcessingResult.SUCCESS
        assert result.stage is CallbackStage.DONE
        assert result.payment_status is PaymentStatus.PAID
        assert len(transport.requests) == 1
        order = store.get_order(42)
        assert order.payment_status is PaymentStatus.PAID
        assert order.order_status is OrderStatus.COMPLETED
        assert order.transaction_id == "TUTOR-42-1735689600"

    def test_failed_validation_leaves_order_untouched(
        self, make_handler, sslcommerz_api, notification_form, existing_order, store
    ):
        transport = sslcommerz_api({"status": "FAILED"})

        result = make_handler(transport).handle_landing(SUCCESS_QUERY, notification_form)

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.VALIDATED
        order = store.get_order(42)
        assert order.payment_status is PaymentStatus.PENDING
        assert order.transaction_id is None

    def test_duplicate_delivery_converges(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        handler = make_handler(sslcommerz_api(make_validation_body()))

        first = handler.handle_notification(notification_form)
        second = handler.handle_notification(notification_form)

        assert first.result is second.result is ProcessingResult.SUCCESS
        assert store.get_order(42).order_status is OrderStatus.COMPLETED

    def test_unknown_order_is_skipped(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, store
    ):
        result = make_handler(sslcommerz_api(make_validation_body())).handle_notification(
            notification_form
        )

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.RECONCILED
        assert result.error_code is ErrorCode.ORDER_NOT_FOUND
        assert store.get_order(42) is None

    def test_notification_status_decides_payment_status(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        """A confirmed transaction whose notification says VALIDATED is paid."""
        notification_form["status"] = "VALIDATED"

        make_handler(sslcommerz_api(make_validation_body())).handle_notification(notification_form)

        assert store.get_order(42).payment_status is PaymentStatus.PAID

    def test_missing_notification_status_falls_back_to_processor(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        del notification_form["status"]

        result = make_handler(sslcommerz_api(make_validation_body())).handle_notification(
            notification_form
        )

        assert result.payment_status is PaymentStatus.PAID


# === Failure Outcomes ===


class TestFailureOutcomes:
    """Failures are reported as results and never raised."""

    def test_missing_credentials_skip_without_network(
        self, make_handler, settings, sslcommerz_api, notification_form
    ):
        settings.get_credentials.side_effect = CredentialsError(ErrorCode.GATEWAY_NOT_CONFIGURED)
        transport = sslcommerz_api({})

        result = make_handler(transport).handle_notification(notification_form)

        assert result.result is ProcessingResult.SKIPPED
        assert result.stage is CallbackStage.CREDENTIALS_RESOLVED
        assert result.error_code is ErrorCode.GATEWAY_NOT_CONFIGURED
        assert transport.requests == []

    def test_hash_mismatch_is_an_error(
        self, make_handler, sslcommerz_api, notification_form, existing_order, store
    ):
        notification_form["verify_key"] = "amount,tran_id"
        notification_form["verify_sign"] = hashlib.md5(b"forged").hexdigest()
        transport = sslcommerz_api({})

        result = make_handler(transport).handle_notification(notification_form)

        assert result.result is ProcessingResult.ERROR
        assert result.stage is CallbackStage.VERIFIED
        assert result.error_code is ErrorCode.HASH_MISMATCH
        assert transport.requests == []
        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_transport_failure_is_an_error(
        self, make_handler, sslcommerz_api, notification_form, existing_order, store
    ):
        transport = sslcommerz_api(error=httpx.ConnectTimeout("timed out"))

        result = make_handler(transport).handle_notification(notification_form)

        assert result.result is ProcessingResult.ERROR
        assert result.error_code is ErrorCode.TRANSPORT_FAILURE
        assert result.message == "ConnectTimeout"
        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_amount_mismatch_is_an_error(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        transport = sslcommerz_api(make_validation_body(amount="5.00"))

        result = make_handler(transport).handle_notification(notification_form)

        assert result.result is ProcessingResult.ERROR
        assert result.stage is CallbackStage.VALIDATED
        assert result.error_code is ErrorCode.VALIDATION_REJECTED
        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_unexpected_fault_is_contained(
        self, settings, sslcommerz_api, make_validation_body, notification_form
    ):
        store = MagicMock()
        store.update_order.side_effect = RuntimeError("table gone")
        handler = CallbackHandler(
            settings=settings,
            reconciler=OrderReconciler(store),
            validation_client_factory=lambda creds: ValidationClient(
                creds, transport=sslcommerz_api(make_validation_body())
            ),
        )

        result = handler.handle_notification(notification_form)

        assert result.result is ProcessingResult.ERROR
        assert result.error_code is ErrorCode.INTERNAL_ERROR
        assert result.message == "RuntimeError"
        assert result.order_id == 42


# === Failure Write-back ===


class TestFailureWriteBack:
    """Processor-confirmed failures are written back only when enabled."""

    def test_disabled_by_default(self, make_handler):
        assert make_handler().write_back_failures is False

    def test_enabled_from_environment(self, make_handler, monkeypatch):
        monkeypatch.setenv("SSLCOMMERZ_WRITE_BACK_FAILURES", "true")

        assert make_handler().write_back_failures is True

    @pytest.mark.parametrize(
        "processor_status,expected",
        [("FAILED", PaymentStatus.FAILED), ("CANCELLED", PaymentStatus.CANCELLED)],
    )
    def test_enabled_marks_order(
        self,
        processor_status,
        expected,
        make_handler,
        sslcommerz_api,
        make_validation_body,
        notification_form,
        existing_order,
        store,
    ):
        notification_form["status"] = processor_status
        transport = sslcommerz_api(make_validation_body(status=processor_status))

        result = make_handler(transport, write_back_failures=True).handle_notification(
            notification_form
        )

        assert result.result is ProcessingResult.SUCCESS
        assert result.payment_status is expected
        order = store.get_order(42)
        assert order.payment_status is expected
        assert order.order_status is OrderStatus.INCOMPLETE

    def test_requires_matching_transaction(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        transport = sslcommerz_api(make_validation_body(status="FAILED", tran_id="TUTOR-99-1"))

        result = make_handler(transport, write_back_failures=True).handle_notification(
            notification_form
        )

        assert result.result is ProcessingResult.SKIPPED
        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_never_writes_on_hash_mismatch(
        self, make_handler, sslcommerz_api, notification_form, existing_order, store
    ):
        notification_form["verify_key"] = "amount"
        notification_form["verify_sign"] = "0" * 32

        make_handler(sslcommerz_api({"status": "FAILED"}), write_back_failures=True).handle_notification(
            notification_form
        )

        assert store.get_order(42).payment_status is PaymentStatus.PENDING

    def test_disabled_leaves_order_untouched(
        self, make_handler, sslcommerz_api, make_validation_body, notification_form, existing_order, store
    ):
        transport = sslcommerz_api(make_validation_body(status="FAILED"))

        make_handler(transport).handle_notification(notification_form)

        assert store.get_order(42).payment_status is PaymentStatus.PENDING
