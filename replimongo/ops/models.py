from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from ..errors import ErrorKind, InputError


class OperationKind(str, Enum):
    INSERT_ONE = "insertOne"
    INSERT_MANY = "insertMany"
    UPDATE_ONE = "updateOne"
    UPDATE_MANY = "updateMany"
    DELETE_ONE = "deleteOne"
    DELETE_MANY = "deleteMany"
    REPLACE_ONE = "replaceOne"
    FIND = "find"
    FIND_ONE = "findOne"
    AGGREGATE = "aggregate"
    COUNT_DOCUMENTS = "countDocuments"


def kind_label(kind: Union[OperationKind, str]) -> str:
    return kind.value if isinstance(kind, OperationKind) else str(kind)


@dataclass(frozen=True)
class OperationDescriptor:
    """
    A single logical document-store operation to replicate.

    `kind` is normally an OperationKind. A label that did not match any
    known kind is kept as a plain string so it can be reported per replica
    instead of aborting the job.
    """
    kind: Union[OperationKind, str]
    collection: str
    filter: Optional[Mapping[str, Any]] = None
    data: Any = None  # mapping for single-document writes, sequence for insertMany
    pipeline: Optional[Sequence[Any]] = None
    options: Optional[Mapping[str, Any]] = None

    @property
    def label(self) -> str:
        return kind_label(self.kind)

    @classmethod
    def from_dict(cls, payload: Any) -> "OperationDescriptor":
        """
        Build a descriptor from a decoded job payload.

        Expected shape:
            {"operation": "insertOne", "collection": "students",
             "filter": {...}, "data": {...}, "pipeline": [...], "options": {...}}

        Raises:
            InputError: If the payload is not a mapping or lacks
                `operation` / `collection`, or if a sub-tree has the wrong shape.
        """
        if not isinstance(payload, Mapping):
            raise InputError(
                f"operation payload must be an object, got {type(payload).__name__}"
            )

        label = payload.get("operation")
        if not isinstance(label, str) or not label:
            raise InputError("operation payload is missing 'operation'")

        collection = payload.get("collection")
        if not isinstance(collection, str) or not collection:
            raise InputError("operation payload is missing 'collection'")

        filter_ = payload.get("filter")
        if filter_ is not None and not isinstance(filter_, Mapping):
            raise InputError("'filter' must be an object")

        pipeline = payload.get("pipeline")
        if pipeline is not None and not isinstance(pipeline, list):
            raise InputError("'pipeline' must be an array")

        options = payload.get("options")
        if options is not None and not isinstance(options, Mapping):
            raise InputError("'options' must be an object")

        try:
            kind: Union[OperationKind, str] = OperationKind(label)
        except ValueError:
            kind = label

        return cls(
            kind=kind,
            collection=collection,
            filter=filter_,
            data=payload.get("data"),
            pipeline=pipeline,
            options=options,
        )


@dataclass(frozen=True)
class DispatchResult:
    """Normalized result of running one operation against one database."""
    success: bool
    affected_count: Optional[int] = None
    documents: Optional[list[Any]] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, affected_count: int, documents: Optional[list[Any]] = None) -> "DispatchResult":
        return cls(success=True, affected_count=max(0, int(affected_count)), documents=documents)

    @classmethod
    def failed(cls, error_kind: ErrorKind, error: str) -> "DispatchResult":
        return cls(success=False, error=error, error_kind=error_kind)
