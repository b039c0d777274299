"""Logging for the bridge, keyed by a per-request correlation ID.

Every record carries `correlation_id`, so one landing request or IPN can
be followed from form parsing to the order update. Callback and checkout
outcomes are logged through the two helpers at the bottom, which put the
identifiers both in the message and in the record's `extra` fields.

Usage:
    from sslcommerz_bridge.utils.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Validating transaction %s", tran_id)

Never hand these helpers a store password, a signature or the validation
URL.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

NO_CORRELATION_ID = "-"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Callback results that are not plain successes
_RESULT_LEVELS = {"error": logging.ERROR, "skipped": logging.WARNING}


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation ID to the current context, generating one if needed."""
    cid = correlation_id or uuid.uuid4().hex
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Stamps the bound correlation ID onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter that tolerates records which bypassed the filter."""

    def __init__(self, fmt: str = LOG_FORMAT) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """Return the named logger with a CorrelationIdFilter attached once."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def configure_logging(level: int = logging.INFO) -> None:
    """Attach a correlation-aware stream handler to the root logger.

    Repeated calls only adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationIdFilter())
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)

    # httpx logs request URLs at INFO and validation URLs carry the store password
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _emit(logger: logging.Logger, level: int, headline: str, fields: dict[str, Any]) -> None:
    present = {key: value for key, value in fields.items() if value is not None}
    details = " ".join(f"{key}={value}" for key, value in present.items())
    logger.log(level, f"{headline} {details}" if details else headline, extra=present)


def log_payment_operation(
    logger: logging.Logger,
    operation: str,
    *,
    order_id: int | None = None,
    tran_id: str | None = None,
    amount: str | None = None,
    currency: str | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log one step of a checkout payment session.

    Args:
        logger: Logger to write to
        operation: Step name, e.g. "create_payment"
        order_id: Tutor order ID
        tran_id: Transaction ID sent to SSLCommerz
        amount: Amount as sent, two decimals
        currency: Currency code
        status: Status reported by SSLCommerz
        error: Failure reason; logs at ERROR when set
    """
    fields = {
        "order_id": order_id,
        "tran_id": tran_id,
        "amount": amount,
        "currency": currency,
        "status": status,
        "error": error,
        **extra,
    }
    level = logging.ERROR if error else logging.INFO
    _emit(logger, level, f"payment {operation}", fields)


def log_callback_event(
    logger: logging.Logger,
    stage: str,
    tran_id: str | None,
    *,
    order_id: int | None = None,
    payment_status: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log where a landing request or IPN stopped and why.

    Skipped deliveries log at WARNING and errors at ERROR.
    """
    fields = {
        "result": result,
        "order_id": order_id,
        "payment_status": payment_status,
        "error": error,
        **extra,
    }
    level = _RESULT_LEVELS.get(result or "", logging.INFO)
    _emit(logger, level, f"callback {stage} tran_id={tran_id or '-'}", fields)
