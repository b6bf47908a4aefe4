"""Per-item outcome and batch summary models."""

import enum

from pydantic import BaseModel, ConfigDict, Field


class OutcomeStatus(enum.StrEnum):
    """Terminal state of a single item.

    Flow: (started) -> SUCCEEDED | FAILED | CANCELLED
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Outcome(BaseModel):
    """Result of one item, delivered once to the progress sink."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: OutcomeStatus
    error: BaseException | None = Field(
        default=None, description="Error that ended the item, if any"
    )
    bytes_transferred: int = Field(default=0, ge=0)

    @classmethod
    def succeeded(cls, bytes_transferred: int = 0) -> "Outcome":
        return cls(status=OutcomeStatus.SUCCEEDED, bytes_transferred=bytes_transferred)

    @classmethod
    def failed(cls, error: BaseException, bytes_transferred: int = 0) -> "Outcome":
        return cls(
            status=OutcomeStatus.FAILED,
            error=error,
            bytes_transferred=bytes_transferred,
        )

    @classmethod
    def cancelled(
        cls, error: BaseException | None = None, bytes_transferred: int = 0
    ) -> "Outcome":
        return cls(
            status=OutcomeStatus.CANCELLED,
            error=error,
            bytes_transferred=bytes_transferred,
        )

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED

    @property
    def error_message(self) -> str | None:
        """Readable "Type: message" form of the error, if any."""
        if self.error is None:
            return None
        return f"{type(self.error).__name__}: {self.error}"


class BatchSummary(BaseModel):
    """Aggregate result of a batch that ran to completion.

    Individual failures are counted here; they do not make the batch fail.
    """

    total: int = Field(default=0, ge=0, description="Items dequeued and started")
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
    bytes_transferred: int = Field(default=0, ge=0)

    def record(self, outcome: Outcome) -> None:
        """Fold one item's outcome into the totals."""
        self.total += 1
        self.bytes_transferred += outcome.bytes_transferred
        match outcome.status:
            case OutcomeStatus.SUCCEEDED:
                self.succeeded += 1
            case OutcomeStatus.FAILED:
                self.failed += 1
            case OutcomeStatus.CANCELLED:
                self.cancelled += 1
