from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping

from .models import OperationDescriptor

# Identifiers some replicas store as strings while the job may carry numbers.
DEFAULT_STRINGIFY_FIELDS: tuple[str, ...] = ("Id_Aula",)

LeafPredicate = Callable[[str, Any], bool]
LeafTransform = Callable[[Any], Any]


def transform_tree(tree: Any, predicate: LeafPredicate, transform: LeafTransform) -> Any:
    """
    Return a copy of `tree` where every mapping entry accepted by
    `predicate(key, value)` has its value replaced by `transform(value)`.

    Entries that are not accepted recurse structurally: lists and tuples
    element-wise, mappings per value. Scalars and None are returned as-is.
    The input is never mutated and the set of keys never changes.
    """
    if isinstance(tree, Mapping):
        out: dict[Any, Any] = {}
        for key, value in tree.items():
            if predicate(key, value):
                out[key] = transform(value)
            else:
                out[key] = transform_tree(value, predicate, transform)
        return out

    if isinstance(tree, (list, tuple)):
        items = [transform_tree(item, predicate, transform) for item in tree]
        return items if isinstance(tree, list) else tuple(items)

    return tree


def to_string(value: Any) -> str:
    """
    Render a scalar the way the producing system does, so replicas agree on
    the stored text: booleans are lowercase and integral floats drop their
    fraction (`7.0` becomes `"7"`).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def stringify_fields(tree: Any, fields: Iterable[str]) -> Any:
    """Convert the non-null values of the named fields to strings, at any depth."""
    names = frozenset(fields)
    return transform_tree(
        tree,
        lambda key, value: key in names and value is not None,
        to_string,
    )


def sanitize(
    descriptor: OperationDescriptor,
    fields: Iterable[str] = DEFAULT_STRINGIFY_FIELDS,
) -> OperationDescriptor:
    """
    Return a new descriptor whose filter, data and pipeline have the given
    fields stringified. Each sub-tree is handled on its own; an absent one
    stays absent.
    """
    names = tuple(fields)
    return replace(
        descriptor,
        filter=stringify_fields(descriptor.filter, names),
        data=stringify_fields(descriptor.data, names),
        pipeline=stringify_fields(descriptor.pipeline, names),
    )
