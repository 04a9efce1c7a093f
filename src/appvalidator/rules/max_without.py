"""The ``max_without`` rule.

Parameter syntax::

    max_without=<path1> <path2> ... <pathN> <threshold>

The field must not exceed ``threshold`` unless at least one of the listed
paths (relative to the structure that holds the field, nested fields joined
with ``.``) is non-empty. With no paths it is a plain max check::

    class Search(RuleModel):
        limit: Annotated[Uint | None, Rule("max_without", "filters.name query.text 1000")] = None
        filters: Filters = Filters()
        query: Query = Query()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from appvalidator.rules.comparator import is_within_max
from appvalidator.rules.resolver import is_present, split_path

if TYPE_CHECKING:
    from appvalidator.engine.field_level import FieldLevel

RULE_NAME = "max_without"


def split_params(param: str) -> tuple[list[list[str]], str]:
    """Split a parameter string into dependency paths and the threshold literal."""
    tokens = param.split(" ")
    return [split_path(token) for token in tokens[:-1]], tokens[-1]


def max_without(fl: FieldLevel) -> bool:
    """Pass when any dependency is present, otherwise apply the max check."""
    dependency_paths, max_literal = split_params(fl.param)
    for path in dependency_paths:
        if is_present(fl.parent, path):
            return True
    return is_within_max(fl.field, max_literal)
