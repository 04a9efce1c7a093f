"""Value kinds and the FieldValue handle.

Every value the resolver and comparator look at is classified into a closed
set of kinds. The declared type (from a class annotation) wins over the
runtime type, because the same runtime value can mean different things:
``Optional[list[str]]`` holding ``None`` is an empty sequence, an ``int``
annotated with a non-negative bound is unsigned, and a bare ``None`` with no
declared type is an absent reference.
"""

from __future__ import annotations

import asyncio
import collections
import collections.abc
import dataclasses
import enum
import math
import numbers
import queue
import types
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

import annotated_types
from pydantic import BaseModel

Uint = Annotated[int, annotated_types.Ge(0)]
"""Unsigned integer annotation, e.g. ``limit: Uint | None = None``."""


class ValueKind(StrEnum):
    """Semantic categories driving presence and threshold dispatch."""

    UINT = "uint"
    INT = "int"
    DURATION = "duration"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    ARRAY = "array"
    FLOAT = "float"
    TIMESTAMP = "timestamp"
    STRUCT = "struct"
    OPTIONAL = "optional"
    INTERFACE = "interface"
    CHANNEL = "channel"
    FUNC = "func"
    BOOL = "bool"
    OTHER = "other"


# Kinds whose zero value is "no value at all" (Go's nil).
NILABLE_KINDS = frozenset(
    {
        ValueKind.SEQUENCE,
        ValueKind.MAPPING,
        ValueKind.OPTIONAL,
        ValueKind.INTERFACE,
        ValueKind.CHANNEL,
        ValueKind.FUNC,
    }
)

COLLECTION_KINDS = frozenset({ValueKind.SEQUENCE, ValueKind.MAPPING, ValueKind.ARRAY})

_ZERO_TIMESTAMP = datetime(1, 1, 1)

_SEQUENCE_TYPES: tuple[type, ...] = (
    list,
    set,
    frozenset,
    bytes,
    bytearray,
    collections.deque,
    collections.abc.Set,
    collections.abc.MutableSequence,
)
_CHANNEL_TYPES: tuple[type, ...] = (queue.Queue, queue.SimpleQueue, asyncio.Queue)
_UNION_ORIGINS = (Union, types.UnionType)


@dataclass(frozen=True)
class FieldValue:
    """A runtime value paired with the type it was declared as (if known)."""

    value: Any
    declared: Any = None

    @property
    def kind(self) -> ValueKind:
        return kind_of(self.value, self.declared)

    def unwrap(self) -> FieldValue:
        """Dereference one level of optional wrapping.

        The value is unchanged (Python has no pointers); only the declared
        type loses its ``None`` member so the inner kind drives dispatch.
        """
        if self.declared is None or self.kind is not ValueKind.OPTIONAL:
            return self
        return FieldValue(self.value, optional_inner(self.declared))


def as_field_value(value: Any) -> FieldValue:
    """Wrap a bare value; FieldValue instances pass through."""
    if isinstance(value, FieldValue):
        return value
    return FieldValue(value)


def kind_of(value: Any, declared: Any = None) -> ValueKind:
    """Classify *value*, preferring the kind implied by *declared*."""
    if declared is not None:
        kind = kind_of_type(declared)
        if kind is not None:
            return kind
    return _kind_of_runtime(value)


def kind_of_type(declared: Any) -> ValueKind | None:
    """Kind implied by a type annotation, or None when it says nothing useful."""
    base, metadata = strip_annotated(declared)

    if base is Any or base is object or isinstance(base, TypeVar):
        return ValueKind.INTERFACE

    origin = get_origin(base)
    if origin in _UNION_ORIGINS:
        members = [arg for arg in get_args(base) if arg is not type(None)]
        if len(members) != 1:
            return ValueKind.INTERFACE
        inner = kind_of_type(members[0])
        # Optional collections model nil-able slices and maps.
        if inner in (ValueKind.SEQUENCE, ValueKind.MAPPING):
            return inner
        return ValueKind.OPTIONAL

    cls = origin if isinstance(origin, type) else base
    if origin is collections.abc.Callable:
        return ValueKind.FUNC
    if not isinstance(cls, type):
        return None

    if issubclass(cls, bool):
        return ValueKind.BOOL
    if issubclass(cls, int):
        return ValueKind.UINT if _is_unsigned(metadata) else ValueKind.INT
    if issubclass(cls, float):
        return ValueKind.FLOAT
    if issubclass(cls, timedelta):
        return ValueKind.DURATION
    if issubclass(cls, datetime):
        return ValueKind.TIMESTAMP
    if issubclass(cls, str):
        return ValueKind.STRING
    if issubclass(cls, tuple):
        if hasattr(cls, "_fields"):
            return ValueKind.STRUCT
        args = get_args(base)
        if len(args) == 2 and args[1] is Ellipsis:
            return ValueKind.SEQUENCE
        return ValueKind.ARRAY
    if issubclass(cls, _SEQUENCE_TYPES):
        return ValueKind.SEQUENCE
    if issubclass(cls, collections.abc.Mapping):
        return ValueKind.MAPPING
    if issubclass(cls, _CHANNEL_TYPES):
        return ValueKind.CHANNEL
    if dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel):
        return ValueKind.STRUCT
    if issubclass(cls, (date, numbers.Number, enum.Enum)):
        return ValueKind.OTHER
    return None


def strip_annotated(declared: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *meta]`` into ``(T, meta)``; nested wrappers merge."""
    metadata: tuple[Any, ...] = ()
    while get_origin(declared) is Annotated:
        metadata = metadata + tuple(declared.__metadata__)
        declared = declared.__origin__
    return declared, metadata


def optional_inner(declared: Any) -> Any:
    """Return ``T`` for ``T | None`` (keeping Annotated metadata on ``T``)."""
    base, _ = strip_annotated(declared)
    members = [arg for arg in get_args(base) if arg is not type(None)]
    return members[0] if len(members) == 1 else declared


def is_zero(field: FieldValue) -> bool:
    """Whether *field* holds its kind's zero value.

    A structure reached again while its own fields are still being checked
    is a back-reference. It counts as a set reference, so it is never zero.
    """
    return _is_zero(field, set())


def _is_zero(field: FieldValue, active: set[int]) -> bool:
    value = field.value
    if value is None:
        return True

    match field.kind:
        case kind if kind in NILABLE_KINDS:
            return False
        case ValueKind.FLOAT:
            # -0.0 has a non-zero bit pattern
            return value == 0 and math.copysign(1.0, value) > 0
        case ValueKind.DURATION:
            return value == timedelta(0) or value == 0
        case ValueKind.TIMESTAMP:
            return value.replace(tzinfo=None) == _ZERO_TIMESTAMP
        case ValueKind.ARRAY | ValueKind.STRUCT:
            if id(value) in active:
                return False
            active.add(id(value))
            try:
                return all(_is_zero(child, active) for child in _children(field))
            finally:
                active.discard(id(value))
        case _:
            return not value


def _children(field: FieldValue) -> Iterator[FieldValue]:
    if field.kind is ValueKind.ARRAY:
        for item in field.value:
            yield FieldValue(item)
        return

    from appvalidator.domain.fields import iter_field_values

    for _name, child in iter_field_values(field.value):
        yield child


def _is_unsigned(metadata: tuple[Any, ...]) -> bool:
    for item in metadata:
        ge = getattr(item, "ge", None)
        gt = getattr(item, "gt", None)
        if (isinstance(ge, int) and ge >= 0) or (isinstance(gt, int) and gt >= -1):
            return True
    return False


def _kind_of_runtime(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.OPTIONAL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, timedelta):
        return ValueKind.DURATION
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, tuple):
        return ValueKind.STRUCT if hasattr(value, "_fields") else ValueKind.ARRAY
    if isinstance(value, _SEQUENCE_TYPES):
        return ValueKind.SEQUENCE
    if isinstance(value, collections.abc.Mapping):
        return ValueKind.MAPPING
    if isinstance(value, _CHANNEL_TYPES):
        return ValueKind.CHANNEL
    if isinstance(value, (date, numbers.Number, enum.Enum)):
        return ValueKind.OTHER
    if callable(value):
        return ValueKind.FUNC
    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return ValueKind.STRUCT
    if hasattr(value, "__dict__") or hasattr(type(value), "__slots__"):
        return ValueKind.STRUCT
    return ValueKind.OTHER
