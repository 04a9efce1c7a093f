"""FieldLevel: what a rule function sees for one field."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from appvalidator.domain.kinds import FieldValue


@dataclass(frozen=True)
class FieldLevel:
    """Inputs handed to a rule function for a single marked field.

    Attributes:
        parent: The model (or document) that directly holds the field;
            dependency paths resolve against it.
        field: The field's value, already unwrapped from ``Optional``.
        field_name: Name of the field on its parent.
        rule: Rule name being evaluated.
        param: Raw parameter text of the rule (``""`` when absent).
    """

    parent: FieldValue
    field: FieldValue
    field_name: str
    rule: str
    param: str = ""


RuleFunc = Callable[[FieldLevel], bool]


@dataclass(frozen=True)
class RuleSpec:
    """A rule function plus its registration options.

    ``call_even_if_null``: call the function for ``None`` fields instead of
    failing them outright.
    """

    func: RuleFunc
    call_even_if_null: bool = False
