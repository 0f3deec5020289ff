from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from ..errors import ErrorKind
from .models import DispatchResult, OperationDescriptor, OperationKind

logger = logging.getLogger(__name__)

Handler = Callable[[AsyncIOMotorCollection, OperationDescriptor, Mapping[str, Any]], Awaitable[DispatchResult]]


async def _insert_one(coll, op, options) -> DispatchResult:
    await coll.insert_one(op.data, **options)
    return DispatchResult.ok(1)


async def _insert_many(coll, op, options) -> DispatchResult:
    result = await coll.insert_many(op.data, **options)
    return DispatchResult.ok(len(result.inserted_ids))


async def _update_one(coll, op, options) -> DispatchResult:
    result = await coll.update_one(op.filter or {}, op.data, **options)
    return DispatchResult.ok(result.modified_count)


async def _update_many(coll, op, options) -> DispatchResult:
    result = await coll.update_many(op.filter or {}, op.data, **options)
    return DispatchResult.ok(result.modified_count)


async def _delete_one(coll, op, options) -> DispatchResult:
    result = await coll.delete_one(op.filter or {}, **options)
    return DispatchResult.ok(result.deleted_count)


async def _delete_many(coll, op, options) -> DispatchResult:
    result = await coll.delete_many(op.filter or {}, **options)
    return DispatchResult.ok(result.deleted_count)


async def _replace_one(coll, op, options) -> DispatchResult:
    result = await coll.replace_one(op.filter or {}, op.data, **options)
    return DispatchResult.ok(result.modified_count)


async def _find(coll, op, options) -> DispatchResult:
    documents = await coll.find(op.filter or {}, **options).to_list(length=None)
    return DispatchResult.ok(len(documents), documents)


async def _find_one(coll, op, options) -> DispatchResult:
    document = await coll.find_one(op.filter or {}, **options)
    if document is None:
        return DispatchResult.ok(0, [])
    return DispatchResult.ok(1, [document])


async def _aggregate(coll, op, options) -> DispatchResult:
    documents = await coll.aggregate(list(op.pipeline or []), **options).to_list(length=None)
    return DispatchResult.ok(len(documents), documents)


async def _count_documents(coll, op, options) -> DispatchResult:
    count = await coll.count_documents(op.filter or {}, **options)
    return DispatchResult.ok(count)


HANDLERS: dict[OperationKind, Handler] = {
    OperationKind.INSERT_ONE: _insert_one,
    OperationKind.INSERT_MANY: _insert_many,
    OperationKind.UPDATE_ONE: _update_one,
    OperationKind.UPDATE_MANY: _update_many,
    OperationKind.DELETE_ONE: _delete_one,
    OperationKind.DELETE_MANY: _delete_many,
    OperationKind.REPLACE_ONE: _replace_one,
    OperationKind.FIND: _find,
    OperationKind.FIND_ONE: _find_one,
    OperationKind.AGGREGATE: _aggregate,
    OperationKind.COUNT_DOCUMENTS: _count_documents,
}

_missing = set(OperationKind) - set(HANDLERS)
if _missing:  # pragma: no cover
    raise RuntimeError(f"no dispatch handler for: {sorted(k.value for k in _missing)}")


async def execute(database: AsyncIOMotorDatabase, op: OperationDescriptor) -> DispatchResult:
    """
    Run `op` against `database` and normalize the driver's result.

    Never raises for store-side problems: any exception from the driver is
    returned as an OPERATION_ERROR result carrying the driver's message.
    Safe to call concurrently on independent databases.
    """
    handler = HANDLERS.get(op.kind) if isinstance(op.kind, OperationKind) else None
    if handler is None:
        return DispatchResult.failed(
            ErrorKind.UNSUPPORTED_OPERATION,
            f"unsupported operation: {op.label}",
        )

    try:
        return await handler(database[op.collection], op, dict(op.options or {}))
    except Exception as exc:
        logger.debug("%s on %s failed: %s", op.label, op.collection, exc)
        return DispatchResult.failed(ErrorKind.OPERATION_ERROR, str(exc) or type(exc).__name__)
