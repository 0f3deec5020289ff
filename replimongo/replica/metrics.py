from __future__ import annotations

from ..metrics.registry import (
    REPLICA_CONNECT_LATENCY_SECONDS,
    REPLICATION_DISPATCH_LATENCY_SECONDS,
    REPLICATION_FAILURES_TOTAL,
    REPLICATION_OPERATIONS_TOTAL,
)
from .models import ReplicationOutcome


def observe_outcome(outcome: ReplicationOutcome) -> None:
    status = "success" if outcome.success else "error"
    REPLICATION_OPERATIONS_TOTAL.labels(
        collection=outcome.collection, operation=outcome.operation, status=status
    ).inc()

    if not outcome.success and outcome.error_kind is not None:
        REPLICATION_FAILURES_TOTAL.labels(error_kind=outcome.error_kind.value).inc()

    # Latency only for dispatches that actually reached the store.
    if outcome.duration_ms is not None:
        REPLICATION_DISPATCH_LATENCY_SECONDS.labels(operation=outcome.operation).observe(
            outcome.duration_ms / 1000.0
        )


def observe_connect(latency_s: float, success: bool) -> None:
    status = "success" if success else "error"
    REPLICA_CONNECT_LATENCY_SECONDS.labels(status=status).observe(latency_s)
