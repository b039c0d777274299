"""Result types threaded through the callback pipeline."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import CallbackStage, PaymentStatus, ProcessingResult
from .errors import ERROR_MESSAGES, ErrorCode


class StageResult(BaseModel):
    """Outcome of one pipeline stage.

    success lets the pipeline continue, skipped ends it quietly (bad input,
    nothing to do) and error ends it with something an operator should see.
    """

    model_config = ConfigDict(frozen=True)

    result: ProcessingResult
    stage: CallbackStage
    error_code: ErrorCode | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is ProcessingResult.SUCCESS

    @classmethod
    def success(cls, stage: CallbackStage) -> "StageResult":
        return cls(result=ProcessingResult.SUCCESS, stage=stage)

    @classmethod
    def skipped(
        cls,
        stage: CallbackStage,
        code: ErrorCode | None = None,
        message: str | None = None,
    ) -> "StageResult":
        return cls(
            result=ProcessingResult.SKIPPED,
            stage=stage,
            error_code=code,
            message=message or (ERROR_MESSAGES[code] if code else None),
        )

    @classmethod
    def error(
        cls, stage: CallbackStage, code: ErrorCode, message: str | None = None
    ) -> "StageResult":
        return cls(
            result=ProcessingResult.ERROR,
            stage=stage,
            error_code=code,
            message=message or ERROR_MESSAGES[code],
        )


class CallbackResult(BaseModel):
    """Final outcome of handling one delivery.

    stage is the last state the pipeline reached.
    """

    model_config = ConfigDict(frozen=True)

    result: ProcessingResult
    stage: CallbackStage
    error_code: ErrorCode | None = None
    message: str | None = None
    order_id: int | None = Field(default=None, description="Order correlation id")
    tran_id: str | None = None
    payment_status: PaymentStatus | None = Field(
        default=None, description="Status written to the order, if any"
    )

    @classmethod
    def from_stage(
        cls,
        stage_result: StageResult,
        *,
        order_id: int | None = None,
        tran_id: str | None = None,
    ) -> "CallbackResult":
        return cls(
            result=stage_result.result,
            stage=stage_result.stage,
            error_code=stage_result.error_code,
            message=stage_result.message,
            order_id=order_id,
            tran_id=tran_id,
        )
