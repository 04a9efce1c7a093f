"""Field-by-name access over structure shapes that are not known up front.

Supported shapes:

- dataclasses (declared fields only, types from annotations),
- pydantic models (``model_fields`` plus any allowed extra keys),
- named tuples (``_fields``),
- mappings (looked up by key, no declared types),
- any other attribute-bearing object (``vars()`` and ``__slots__``).

Lookup is exact and case-sensitive. A missing field is reported as ``None``
rather than raised; callers treat it like a zero value.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import typing
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from appvalidator.domain.kinds import FieldValue, ValueKind, kind_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructField:
    """A named field declared on a structure type."""

    name: str
    declared: Any = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@functools.lru_cache(maxsize=512)
def type_hints(cls: type) -> dict[str, Any]:
    """Resolved annotations of *cls*, keeping ``Annotated`` extras.

    Forward references that cannot be resolved fall back to the raw
    ``__annotations__`` entries, which still carry usable metadata when
    they are real objects rather than strings.
    """
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        logger.debug("Could not resolve type hints for %s", cls.__qualname__, exc_info=True)
        raw: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            raw.update(getattr(klass, "__annotations__", {}))
        return {name: hint for name, hint in raw.items() if not isinstance(hint, str)}


def struct_fields(obj: Any) -> tuple[StructField, ...]:
    """Declared fields of a structure value, in declaration order."""
    cls = type(obj)
    if isinstance(obj, Mapping):
        return tuple(StructField(str(key)) for key in obj)

    if isinstance(obj, BaseModel):
        declared = tuple(
            StructField(name, model_field_type(info)) for name, info in cls.model_fields.items()
        )
        # extra="allow" models keep undeclared keys here
        extra = obj.model_extra or {}
        return declared + tuple(StructField(name) for name in extra)

    hints = type_hints(cls)
    if dataclasses.is_dataclass(obj):
        return tuple(
            StructField(f.name, hints.get(f.name), f.metadata) for f in dataclasses.fields(obj)
        )
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        return tuple(StructField(name, hints.get(name)) for name in obj._fields)

    names = list(_instance_attribute_names(obj))
    return tuple(StructField(name, hints.get(name)) for name in names)


def iter_field_values(obj: Any) -> Iterator[tuple[str, FieldValue]]:
    """Yield ``(name, FieldValue)`` for every field of a structure value."""
    for spec in struct_fields(obj):
        yield spec.name, FieldValue(read_field(obj, spec.name), spec.declared)


def field_by_name(obj: Any, name: str) -> FieldValue | None:
    """Look up *name* on *obj*; ``None`` when it has no such field."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if name not in obj:
            return None
        return FieldValue(obj[name])
    if kind_of(obj) is not ValueKind.STRUCT:
        return None

    for spec in struct_fields(obj):
        if spec.name == name:
            return FieldValue(read_field(obj, name), spec.declared)
    return None


def model_field_type(info: FieldInfo) -> Any:
    """Declared type of a pydantic field, with its Annotated metadata restored."""
    # pydantic moves top-level Annotated metadata onto the FieldInfo
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


def read_field(obj: Any, name: str) -> Any:
    """Current value of field *name* (``None`` when unset)."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _instance_attribute_names(obj: Any) -> Iterator[str]:
    seen: set[str] = set()
    for name in getattr(obj, "__dict__", {}):
        seen.add(name)
        yield name
    for klass in type(obj).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in seen or name in ("__dict__", "__weakref__"):
                continue
            if hasattr(obj, name):
                seen.add(name)
                yield name
