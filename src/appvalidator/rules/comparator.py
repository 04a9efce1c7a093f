"""Threshold comparison dispatched on the value's kind.

The threshold literal has no meaning of its own; it is parsed according to
the kind of the value it is compared against. A literal that cannot be
parsed for that kind makes the comparison fail. This is a validation
failure, not a configuration error, so a misconfigured rule rejects every
value of that kind.
"""

from __future__ import annotations

import collections.abc
import logging
from datetime import datetime, timedelta
from typing import Any

from appvalidator.domain.kinds import COLLECTION_KINDS, FieldValue, ValueKind, as_field_value
from appvalidator.domain.literals import (
    as_aware,
    duration_nanoseconds,
    parse_duration,
    parse_float,
    parse_int,
    parse_timestamp,
    parse_uint,
)

logger = logging.getLogger(__name__)

# Runtime types each kind can be compared as. Annotations are not enforced
# on dataclasses or plain classes, so the declared kind can disagree with
# what the field actually holds.
_RUNTIME_TYPES: dict[ValueKind, tuple[type, ...]] = {
    ValueKind.UINT: (int,),
    ValueKind.INT: (int,),
    ValueKind.DURATION: (timedelta, int),
    ValueKind.STRING: (str,),
    ValueKind.SEQUENCE: (collections.abc.Sized,),
    ValueKind.MAPPING: (collections.abc.Sized,),
    ValueKind.ARRAY: (collections.abc.Sized,),
    ValueKind.FLOAT: (float, int),
    ValueKind.TIMESTAMP: (datetime,),
}


def is_within_max(value: FieldValue | Any, max_literal: str) -> bool:
    """Whether *value* is less than or equal to the threshold *max_literal*."""
    field = as_field_value(value).unwrap()
    kind = field.kind
    if field.value is None and kind not in COLLECTION_KINDS:
        return False
    if field.value is not None and not _holds_kind(field.value, kind):
        logger.debug(
            "%s value cannot be compared as %s; failing comparison",
            type(field.value).__name__,
            kind.value,
        )
        return False

    try:
        return _compare(field, kind, max_literal)
    except ValueError:
        logger.debug(
            "Threshold %r cannot be parsed for %s values; failing comparison",
            max_literal,
            kind.value,
        )
        return False


def parse_duration_threshold(literal: str) -> int:
    """Duration expression, or failing that, an integer count of nanoseconds."""
    try:
        return parse_duration(literal)
    except ValueError:
        return parse_int(literal)


def _holds_kind(value: Any, kind: ValueKind) -> bool:
    expected = _RUNTIME_TYPES.get(kind)
    if expected is None:
        # no comparison arm; _compare fails these anyway
        return True
    if isinstance(value, bool):
        return False
    return isinstance(value, expected)


def _compare(field: FieldValue, kind: ValueKind, max_literal: str) -> bool:
    value = field.value
    match kind:
        case ValueKind.UINT:
            return value <= parse_uint(max_literal)
        case ValueKind.INT:
            return value <= parse_int(max_literal)
        case ValueKind.DURATION:
            return duration_nanoseconds(value) <= parse_duration_threshold(max_literal)
        case ValueKind.STRING:
            # code points, not encoded bytes
            return len(value) <= parse_int(max_literal)
        case ValueKind.SEQUENCE | ValueKind.MAPPING | ValueKind.ARRAY:
            length = 0 if value is None else len(value)
            return length <= parse_int(max_literal)
        case ValueKind.FLOAT:
            return value <= parse_float(max_literal)
        case ValueKind.TIMESTAMP:
            return as_aware(value) <= parse_timestamp(max_literal)
        case _:
            return False
