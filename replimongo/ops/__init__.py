from .dispatcher import execute
from .models import DispatchResult, OperationDescriptor, OperationKind
from .sanitize import (
    DEFAULT_STRINGIFY_FIELDS,
    sanitize,
    stringify_fields,
    to_string,
    transform_tree,
)

__all__ = [
    "OperationKind",
    "OperationDescriptor",
    "DispatchResult",
    "execute",
    "sanitize",
    "stringify_fields",
    "to_string",
    "transform_tree",
    "DEFAULT_STRINGIFY_FIELDS",
]
