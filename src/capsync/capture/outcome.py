"""Tagged result of a single capture attempt."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from capsync.errors import CaptureCancelled, CaptureError, CaptureFailed, PermissionDenied

T = TypeVar("T")


class OutcomeKind(str, Enum):
    CAPTURED = "captured"
    CANCELLED = "cancelled"
    FAILED = "failed"
    DENIED = "denied"


@dataclass(frozen=True)
class CaptureOutcome(Generic[T]):
    """Exactly one outcome per capture invocation.

    ``value`` is set only for ``CAPTURED``; ``error`` is set for every other
    kind.
    """

    kind: OutcomeKind
    value: T | None = None
    error: CaptureError | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.CAPTURED

    @classmethod
    def captured(cls, value: T) -> CaptureOutcome[T]:
        return cls(kind=OutcomeKind.CAPTURED, value=value)

    @classmethod
    def cancelled(cls, kind: str) -> CaptureOutcome[T]:
        return cls(kind=OutcomeKind.CANCELLED, error=CaptureCancelled(kind))

    @classmethod
    def failed(cls, code: str, message: str) -> CaptureOutcome[T]:
        return cls(kind=OutcomeKind.FAILED, error=CaptureFailed(code, message))

    @classmethod
    def denied(cls, capability: str, permanent: bool = False) -> CaptureOutcome[T]:
        return cls(kind=OutcomeKind.DENIED, error=PermissionDenied(capability, permanent))
