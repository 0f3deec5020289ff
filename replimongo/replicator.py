from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Sequence

from motor.motor_asyncio import AsyncIOMotorClient

from .aggregate import AggregateReport, aggregate
from .config import ReplicationConfig
from .errors import ErrorKind
from .ops.models import OperationDescriptor
from .ops.sanitize import sanitize
from .replica.connector import ClientFactory, replicate_to
from .replica.models import ReplicationOutcome
from .replica.registry import EndpointRegistry
from .scheduler import fan_out

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplicationRun:
    operation: OperationDescriptor  # as dispatched, after sanitization
    outcomes: list[ReplicationOutcome]
    report: AggregateReport


class Replicator:
    """
    Replicates one operation to many independently-addressed replicas.

    Flow: sanitize -> bounded fan-out of (connect, dispatch, release) per
    target -> aggregate. Every target yields exactly one outcome; per-target
    failures are recorded, never raised.

    Usage:
        replicator = Replicator(StaticEndpointRegistry(urls), ReplicationConfig())
        run = await replicator.run(op, ["rdp03-ins-1", "rdp03-ins-2"])
        if run.report.critical_failure:
            ...
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        config: ReplicationConfig,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ) -> None:
        self.registry = registry
        self.config = config
        self.client_factory = client_factory

    async def run(self, op: OperationDescriptor, targets: Sequence[str]) -> ReplicationRun:
        sanitized = sanitize(op, self.config.stringify_fields)

        logger.info(
            "Replicating %s on collection %s to %d replicas (up to %d at a time)",
            sanitized.label,
            sanitized.collection,
            len(targets),
            self.config.concurrency_limit,
        )

        async def _one(target: str) -> ReplicationOutcome:
            return await replicate_to(
                target,
                sanitized,
                registry=self.registry,
                config=self.config,
                client_factory=self.client_factory,
            )

        def _unexpected(target: str, exc: Exception) -> ReplicationOutcome:
            return ReplicationOutcome.failure(
                target, sanitized, ErrorKind.OPERATION_ERROR, str(exc) or type(exc).__name__
            )

        start = time.monotonic()
        outcomes = await fan_out(
            list(targets), _one, self.config.concurrency_limit, on_error=_unexpected
        )
        total_ms = int((time.monotonic() - start) * 1000)

        report = aggregate(outcomes, total_duration_ms=total_ms)
        logger.info(
            "Replication finished: %d/%d succeeded in %dms",
            report.succeeded,
            report.total,
            total_ms,
        )
        return ReplicationRun(operation=sanitized, outcomes=outcomes, report=report)
