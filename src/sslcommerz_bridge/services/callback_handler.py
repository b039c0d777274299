"""Handler for SSLCommerz landing requests and IPN notifications.

Provides the callback pipeline separate from HTTP routing concerns:

    received -> filtered -> extracted -> credentials_resolved
             -> verified -> validated -> reconciled -> done

Each gate can end the pipeline early. The handler never raises: every
outcome, including unexpected faults, comes back as a CallbackResult, and
SSLCommerz redelivery is the retry mechanism.
"""

import os
from typing import Any, Callable, Mapping

from ..models.callback import CallbackResult, StageResult
from ..models.credentials import ClientCredentials
from ..models.enums import CallbackStage, LandingMode, PaymentStatus, ProcessingResult
from ..models.errors import CredentialsError, ErrorCode, TransportError
from ..models.notification import InboundNotification, ValidationResult
from ..utils.logging import get_logger, log_callback_event
from ..utils.sanitize import sanitize_text_field
from .order_reconciler import OrderReconciler
from .settings_service import GatewaySettingsService
from .status_mapper import CONFIRMED_STATUSES, map_processor_status
from .validation_client import ValidationClient

logger = get_logger(__name__)

LANDING_MODE_PARAM = "landing_mode"

# Processor statuses that may be written back when failure write-back is on
WRITE_BACK_STATUSES = frozenset({"FAILED", "CANCELLED"})

ValidationClientFactory = Callable[[ClientCredentials], ValidationClient]


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


class CallbackHandler:
    """Orchestrates verification, validation and reconciliation.

    Holds no per-delivery state; one instance can serve concurrent
    deliveries.
    """

    def __init__(
        self,
        settings: GatewaySettingsService,
        reconciler: OrderReconciler,
        *,
        validation_client_factory: ValidationClientFactory = ValidationClient,
        write_back_failures: bool | None = None,
    ) -> None:
        """Initialize callback handler.

        Args:
            settings: Source of gateway credentials
            reconciler: Applies statuses to orders
            validation_client_factory: Builds a ValidationClient per delivery
            write_back_failures: Write processor-confirmed FAILED/CANCELLED
                statuses to the order. Defaults to the
                SSLCOMMERZ_WRITE_BACK_FAILURES env var.
        """
        self._settings = settings
        self._reconciler = reconciler
        self._validation_client_factory = validation_client_factory
        self.write_back_failures = (
            _env_flag("SSLCOMMERZ_WRITE_BACK_FAILURES")
            if write_back_failures is None
            else write_back_failures
        )

    def handle_landing(
        self, query: Mapping[str, Any], form: Mapping[str, Any]
    ) -> CallbackResult:
        """Handle the redirect-back landing request.

        Only the success landing variant is processed; fail and cancel
        landings end here without touching the order.

        Args:
            query: Query parameters of the landing request
            form: Form-encoded POST body

        Returns:
            Outcome of the delivery
        """
        landing_mode = query.get(LANDING_MODE_PARAM)
        if isinstance(landing_mode, (list, tuple)):
            landing_mode = landing_mode[0] if landing_mode else None
        if sanitize_text_field(landing_mode) != LandingMode.SUCCESS.value:
            result = CallbackResult(
                result=ProcessingResult.SKIPPED,
                stage=CallbackStage.FILTERED,
                message=f"Landing mode '{sanitize_text_field(landing_mode)}' not handled",
            )
            logger.debug("Ignoring landing request: %s", result.message)
            return result

        return self.handle_notification(form)

    def handle_notification(self, form: Mapping[str, Any]) -> CallbackResult:
        """Handle a notification body from a landing request or IPN push.

        Args:
            form: Form-encoded POST body

        Returns:
            Outcome of the delivery
        """
        notification = InboundNotification.from_form(form)
        tran_id = notification.tran_id
        order_id = notification.order_id

        if not tran_id or order_id <= 0:
            result = CallbackResult.from_stage(
                StageResult.skipped(CallbackStage.EXTRACTED, ErrorCode.INVALID_NOTIFICATION),
                tran_id=tran_id or None,
            )
            self._log(result)
            return result

        try:
            result = self._process(notification, order_id)
        except Exception as e:
            logger.exception("Unexpected error processing transaction %s", tran_id)
            result = CallbackResult(
                result=ProcessingResult.ERROR,
                stage=CallbackStage.EXTRACTED,
                error_code=ErrorCode.INTERNAL_ERROR,
                message=type(e).__name__,
                order_id=order_id,
                tran_id=tran_id,
            )

        self._log(result)
        return result

    def _process(
        self, notification: InboundNotification, order_id: int
    ) -> CallbackResult:
        tran_id = notification.tran_id

        try:
            credentials = self._settings.get_credentials()
        except CredentialsError as e:
            return CallbackResult.from_stage(
                StageResult.skipped(CallbackStage.CREDENTIALS_RESOLVED, e.code),
                order_id=order_id,
                tran_id=tran_id,
            )

        validation_stage, validation = self._validate(credentials, notification)
        if not validation_stage.ok:
            if validation is not None and self._should_write_back(notification, validation):
                return self._reconcile(
                    order_id, tran_id, map_processor_status(validation.status)
                )
            return CallbackResult.from_stage(
                validation_stage, order_id=order_id, tran_id=tran_id
            )

        # The notification's own status decides the order state; the
        # processor status only fills in when the notification omitted it
        processor_status = notification.status or (validation.status if validation else None)
        return self._reconcile(order_id, tran_id, map_processor_status(processor_status))

    def _validate(
        self, credentials: ClientCredentials, notification: InboundNotification
    ) -> tuple[StageResult, ValidationResult | None]:
        """Run the validation client and classify its outcome."""
        client = self._validation_client_factory(credentials)
        try:
            validation = client.validate(notification)
        except TransportError as e:
            return (
                StageResult.error(
                    CallbackStage.VALIDATED,
                    ErrorCode.TRANSPORT_FAILURE,
                    (e.details or {}).get("reason"),
                ),
                None,
            )

        if validation.confirmed:
            return StageResult.success(CallbackStage.VALIDATED), validation

        code = validation.error_code or ErrorCode.VALIDATION_REJECTED
        if code is ErrorCode.HASH_MISMATCH:
            return StageResult.error(CallbackStage.VERIFIED, code, validation.reason), validation
        if code is ErrorCode.INVALID_NOTIFICATION:
            return (
                StageResult.skipped(CallbackStage.VERIFIED, code, validation.reason),
                validation,
            )
        if validation.status not in CONFIRMED_STATUSES:
            # Processor says the payment did not go through
            return (
                StageResult.skipped(CallbackStage.VALIDATED, code, validation.reason),
                validation,
            )
        # Confirmed by the processor but the notification disagrees with it
        return StageResult.error(CallbackStage.VALIDATED, code, validation.reason), validation

    def _should_write_back(
        self, notification: InboundNotification, validation: ValidationResult
    ) -> bool:
        return (
            self.write_back_failures
            and validation.status in WRITE_BACK_STATUSES
            and validation.tran_id is not None
            and validation.tran_id == notification.tran_id.strip()
        )

    def _reconcile(
        self, order_id: int, tran_id: str, payment_status: PaymentStatus
    ) -> CallbackResult:
        stage_result = self._reconciler.reconcile(order_id, payment_status, tran_id)
        if not stage_result.ok:
            return CallbackResult.from_stage(
                stage_result, order_id=order_id, tran_id=tran_id
            )
        return CallbackResult(
            result=ProcessingResult.SUCCESS,
            stage=CallbackStage.DONE,
            order_id=order_id,
            tran_id=tran_id,
            payment_status=payment_status,
        )

    @staticmethod
    def _log(result: CallbackResult) -> None:
        log_callback_event(
            logger,
            result.stage.value,
            result.tran_id,
            order_id=result.order_id,
            payment_status=result.payment_status.value if result.payment_status else None,
            result=result.result.value,
            error=result.message if result.result is not ProcessingResult.SUCCESS else None,
        )
