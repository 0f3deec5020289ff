from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..config import ReplicationConfig
from ..errors import ErrorKind, ReplicaConnectError, ReplicaConnectTimeout
from ..ops.dispatcher import execute
from ..ops.models import DispatchResult, OperationDescriptor
from .metrics import observe_connect, observe_outcome
from .models import ReplicationOutcome
from .registry import EndpointRegistry

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]
Body = Callable[[AsyncIOMotorDatabase], Awaitable[DispatchResult]]


def _consume_abandoned(task: "asyncio.Future[Any]") -> None:
    # Retrieve the outcome of an abandoned attempt so asyncio does not
    # report "exception was never retrieved".
    if not task.cancelled():
        task.exception()


class ReplicaConnector:
    """
    Scoped connection to one replica.

    Use as:
        async with ReplicaConnector("rdp03-ins-1", url, config) as db:
            await db["students"].insert_one({...})

    Entering creates a client and races a `ping` against
    config.connect_timeout_ms. If the window elapses first the attempt is
    abandoned, not awaited. The client is closed on every exit path,
    including a failed or timed-out acquisition.
    """

    def __init__(
        self,
        target: str,
        url: str,
        config: ReplicationConfig,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ) -> None:
        self.target = target
        self.url = url
        self.config = config
        self.client_factory = client_factory
        self._client: Any = None

    async def __aenter__(self) -> AsyncIOMotorDatabase:
        if self._client is not None:
            raise RuntimeError("ReplicaConnector is already active; nested use is not allowed")
        try:
            await self._acquire()
            return self._database()
        except BaseException:
            await self._release()
            raise

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self._release()
        # propagate exceptions (if any)
        return False

    async def _acquire(self) -> None:
        timeout_s = self.config.connect_timeout_ms / 1000.0
        start = time.monotonic()

        try:
            self._client = self.client_factory(self.url, **self.config.client.as_client_kwargs())
            attempt = asyncio.ensure_future(self._client.admin.command("ping"))
        except Exception as exc:
            observe_connect(time.monotonic() - start, False)
            raise ReplicaConnectError(str(exc) or type(exc).__name__) from exc

        done, _ = await asyncio.wait({attempt}, timeout=timeout_s)
        if not done:
            attempt.add_done_callback(_consume_abandoned)
            observe_connect(time.monotonic() - start, False)
            raise ReplicaConnectTimeout(
                f"connection timeout after {self.config.connect_timeout_ms}ms"
            )

        try:
            attempt.result()
        except Exception as exc:
            observe_connect(time.monotonic() - start, False)
            raise ReplicaConnectError(str(exc) or type(exc).__name__) from exc

        observe_connect(time.monotonic() - start, True)

    def _database(self) -> AsyncIOMotorDatabase:
        try:
            return self._client[self.config.database]
        except Exception as exc:
            raise ReplicaConnectError(str(exc) or type(exc).__name__) from exc

    async def _release(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            # motor closes synchronously; newer async drivers return a coroutine
            result = client.close()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.warning("Error closing connection for %s: %s", self.target, exc)


async def with_connection(
    target: str,
    op: OperationDescriptor,
    body: Body,
    *,
    registry: EndpointRegistry,
    config: ReplicationConfig,
    client_factory: ClientFactory = AsyncIOMotorClient,
) -> ReplicationOutcome:
    """
    Run `body` on a scoped connection to `target` and return its outcome.

    Never raises for per-target problems:
    - unknown endpoint       -> CONFIGURATION_ERROR, no connect attempt
    - acquisition timed out  -> CONNECTION_TIMEOUT
    - acquisition failed     -> CONNECTION_ERROR
    - body failed            -> the body's error, or OPERATION_ERROR

    Duration covers the body only, never connection setup.
    """
    url = registry.resolve(target)
    if not url:
        logger.warning("No endpoint configured for replica %s", target)
        return ReplicationOutcome.failure(
            target, op, ErrorKind.CONFIGURATION_ERROR, "endpoint not configured"
        )

    logger.info("Replicating %s on %s to %s", op.label, op.collection, target)

    try:
        async with ReplicaConnector(target, url, config, client_factory) as database:
            start = time.monotonic()
            try:
                result = await body(database)
            except Exception as exc:
                result = DispatchResult.failed(
                    ErrorKind.OPERATION_ERROR, str(exc) or type(exc).__name__
                )
            duration_ms = int((time.monotonic() - start) * 1000)
    except ReplicaConnectTimeout as exc:
        logger.error("Connection timeout for replica %s: %s", target, exc)
        return ReplicationOutcome.failure(target, op, ErrorKind.CONNECTION_TIMEOUT, str(exc))
    except ReplicaConnectError as exc:
        logger.error("Connection error for replica %s: %s", target, exc)
        return ReplicationOutcome.failure(
            target, op, ErrorKind.CONNECTION_ERROR, f"connection error: {exc}"
        )

    outcome = ReplicationOutcome.from_dispatch(target, op, result, duration_ms)
    if outcome.success:
        logger.info(
            "Completed on %s: %d documents affected in %dms",
            target,
            outcome.affected_count,
            duration_ms,
        )
    else:
        logger.error("Error on replica %s: %s", target, outcome.error)
    return outcome


async def replicate_to(
    target: str,
    op: OperationDescriptor,
    *,
    registry: EndpointRegistry,
    config: ReplicationConfig,
    client_factory: ClientFactory = AsyncIOMotorClient,
) -> ReplicationOutcome:
    """Replicate `op` to a single target; see with_connection()."""

    async def _dispatch(database: AsyncIOMotorDatabase) -> DispatchResult:
        return await execute(database, op)

    outcome = await with_connection(
        target,
        op,
        _dispatch,
        registry=registry,
        config=config,
        client_factory=client_factory,
    )
    try:
        observe_outcome(outcome)
    except Exception:
        # metrics must never mask a replication outcome
        logger.debug("Failed to record metrics for %s", target, exc_info=True)
    return outcome
