from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..errors import ErrorKind
from ..ops.models import DispatchResult, OperationDescriptor


@dataclass(frozen=True)
class ReplicationOutcome:
    """
    Result of replicating one operation to one replica.

    `affected_count` is only set on success; `error` and `error_kind`
    only on failure.
    """
    target: str
    success: bool
    operation: str
    collection: str
    affected_count: Optional[int] = None
    duration_ms: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    documents: Optional[list[Any]] = None

    @classmethod
    def failure(
        cls,
        target: str,
        op: OperationDescriptor,
        error_kind: ErrorKind,
        error: str,
        duration_ms: Optional[int] = None,
    ) -> "ReplicationOutcome":
        return cls(
            target=target,
            success=False,
            operation=op.label,
            collection=op.collection,
            duration_ms=duration_ms,
            error=error,
            error_kind=error_kind,
        )

    @classmethod
    def from_dispatch(
        cls,
        target: str,
        op: OperationDescriptor,
        result: DispatchResult,
        duration_ms: int,
    ) -> "ReplicationOutcome":
        if not result.success:
            return cls.failure(
                target,
                op,
                result.error_kind or ErrorKind.OPERATION_ERROR,
                result.error or "operation failed",
                duration_ms=duration_ms,
            )
        return cls(
            target=target,
            success=True,
            operation=op.label,
            collection=op.collection,
            affected_count=result.affected_count or 0,
            duration_ms=duration_ms,
            documents=result.documents,
        )
