"""Dependency resolution: is the field at a dot-separated path non-empty?

Paths are walked from a root structure one segment at a time. A zero-valued
intermediate stops the walk immediately, so ``Filters.Nested.Items`` on a
zero ``Nested`` never touches ``Items``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from appvalidator.domain.fields import field_by_name
from appvalidator.domain.kinds import FieldValue, ValueKind, as_field_value, is_zero


def split_path(path: str) -> list[str]:
    """Split a dependency path on ``.`` (``""`` yields a single empty segment)."""
    return path.split(".")


def is_present(root: FieldValue | Any, path: Sequence[str]) -> bool:
    """Whether the field at *path* below *root* holds a non-empty value.

    Missing fields, unsupported shapes and ``None`` anywhere along the way
    resolve to ``False``; nothing here raises for bad paths.
    """
    current = as_field_value(root).unwrap()
    if current.value is None:
        return False

    if path:
        child = field_by_name(current.value, path[0])
        if child is None or is_zero(child):
            return False
        return is_present(child, path[1:])

    match current.kind:
        case ValueKind.SEQUENCE | ValueKind.MAPPING:
            return len(current.value) > 0
        case ValueKind.OPTIONAL | ValueKind.INTERFACE | ValueKind.CHANNEL | ValueKind.FUNC:
            return True
        case _:
            return not is_zero(current)
