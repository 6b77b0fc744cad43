"""
Result-style return values for the local stores.

Public queue/cache operations never raise; they unwrap one of these into a safe
default and log the tagged failure reason.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureReason(str, enum.Enum):
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    MALFORMED_CONTENT = "MALFORMED_CONTENT"
    TRANSACTION_ABORTED = "TRANSACTION_ABORTED"
    QUEUE_FULL = "QUEUE_FULL"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    value: Optional[T] = None
    failure: Optional[FailureReason] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T = None) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, reason: FailureReason, detail: Optional[str] = None) -> "StoreResult[T]":
        return cls(failure=reason, detail=detail)

    def unwrap_or(self, default: T, logger: logging.Logger, operation: str) -> T:
        """
        Return the value, or log the failure reason and return default.

        MALFORMED_CONTENT is an expected degraded state and logs at WARNING;
        everything else logs at ERROR.
        """
        if self.ok:
            return self.value
        level = logging.WARNING if self.failure == FailureReason.MALFORMED_CONTENT else logging.ERROR
        logger.log(level, f"{operation} failed [{self.failure.value}]: {self.detail}")
        return default
