from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def batches(targets: Sequence[T], limit: int) -> list[list[T]]:
    """
    Partition `targets` into contiguous batches of at most `limit`, in input
    order. Returns a single batch when everything fits under the limit and
    no batch at all for an empty input.
    """
    if limit <= 0:
        raise ValueError("limit must be > 0")
    items = list(targets)
    return [items[i:i + limit] for i in range(0, len(items), limit)]


async def fan_out(
    targets: Sequence[T],
    per_target: Callable[[T], Awaitable[R]],
    limit: int,
    on_error: Callable[[T, Exception], R],
) -> list[R]:
    """
    Run `per_target` for every target with at most `limit` in flight.

    Members of one batch run concurrently; batch k+1 starts only after every
    member of batch k has settled. A failing target never stops the others
    and is never retried. If `per_target` raises, `on_error(target, exc)`
    supplies that target's result, so one target's error never fails the
    whole fan-out. Only a BaseException (cancellation) is re-raised, once
    its batch has settled.

    Results are returned in input order, one per target.
    """
    groups = batches(targets, limit)
    if len(groups) > 1:
        logger.info(
            "Processing %d targets in batches of %d", len(targets), limit
        )

    results: list[R] = []
    for index, group in enumerate(groups, start=1):
        if len(groups) > 1:
            logger.info("Processing batch %d/%d: %s", index, len(groups), group)

        settled = await asyncio.gather(
            *(per_target(target) for target in group),
            return_exceptions=True,
        )

        for target, result in zip(group, settled):
            if isinstance(result, Exception):
                logger.error("Unhandled error for target %s: %s", target, result)
                results.append(on_error(target, result))
            elif isinstance(result, BaseException):
                raise result
            else:
                results.append(result)

    return results
