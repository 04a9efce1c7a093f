"""Rule markers and the pydantic hook that applies them.

Rules are attached to model fields through ``Annotated``::

    class Search(RuleModel):
        limit: Annotated[Uint | None, Rule("max_without", "filters.name query 1000")] = None
        filters: Filters = Filters()
        query: str = ""

``RuleModel`` runs every marked rule after pydantic has validated the
fields, with the model itself as the parent that dependency paths resolve
against. All failures of one model are raised together as a single
``rule_failed`` error, so they surface in a regular ``ValidationError``
(nested models report under their field's location).

Rules are looked up in the registry passed as ``context={"rules": ...}`` to
``model_validate()``, or in :func:`default_registry` otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from pydantic import BaseModel, ValidationError, ValidationInfo, model_validator
from pydantic.fields import FieldInfo
from pydantic_core import PydanticCustomError

from appvalidator.domain.fields import model_field_type
from appvalidator.domain.kinds import FieldValue, ValueKind, is_zero, kind_of_type
from appvalidator.engine.errors import FieldError
from appvalidator.engine.field_level import FieldLevel
from appvalidator.engine.registry import RuleRegistry, default_registry

RULE_FAILED = "rule_failed"
RULES_CONTEXT_KEY = "rules"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """``Annotated`` marker naming a registered rule and its parameter.

    ``omit_empty`` skips the rule while the field holds its zero value.
    """

    name: str
    param: str = ""
    omit_empty: bool = False


def rule_markers(info: FieldInfo) -> list[Rule]:
    """Rule markers declared on a model field, in declaration order."""
    return [item for item in info.metadata if isinstance(item, Rule)]


def extract(field: FieldValue) -> FieldValue:
    """Drop one optional wrapper; ``Any`` declarations use the runtime kind."""
    field = field.unwrap()
    if field.declared is not None and kind_of_type(field.declared) is ValueKind.INTERFACE:
        return FieldValue(field.value)
    return field


def apply_rule(
    registry: RuleRegistry,
    rule: Rule,
    field: FieldValue,
    *,
    parent: FieldValue,
    field_name: str,
) -> bool:
    """Run *rule* against one field and return whether it passed.

    A ``None`` field that is not a sequence or mapping fails without calling
    the rule, unless the rule was registered with ``call_even_if_null``.

    Raises:
        UnknownRuleError: If *rule* names nothing in *registry*.
    """
    spec = registry.get(rule.name)
    field = extract(field)
    if rule.omit_empty and is_zero(field):
        return True

    is_null = field.value is None and field.kind not in (ValueKind.SEQUENCE, ValueKind.MAPPING)
    if is_null and not spec.call_even_if_null:
        return False
    level = FieldLevel(
        parent=parent,
        field=field,
        field_name=field_name,
        rule=rule.name,
        param=rule.param,
    )
    return spec.func(level)


class RuleModel(BaseModel):
    """Base model that applies ``Rule`` markers once its fields are valid."""

    @model_validator(mode="after")
    def _apply_rules(self, info: ValidationInfo) -> Self:
        registry = _registry_from(info.context)
        parent = FieldValue(self)
        failures: list[dict[str, Any]] = []

        for name, field_info in type(self).model_fields.items():
            rules = rule_markers(field_info)
            if not rules:
                continue
            field = FieldValue(getattr(self, name), model_field_type(field_info))
            for rule in rules:
                if apply_rule(registry, rule, field, parent=parent, field_name=name):
                    continue
                logger.debug("Field %s failed rule %s=%s", name, rule.name, rule.param)
                failures.append(
                    {
                        "field": name,
                        "rule": rule.name,
                        "param": rule.param,
                        "value": field.value,
                        "kind": extract(field).kind.value,
                    }
                )
                # first failure per field
                break

        if failures:
            summary = "; ".join(
                f"Field validation for '{f['field']}' failed on the '{f['rule']}' tag"
                for f in failures
            )
            raise PydanticCustomError(
                RULE_FAILED,
                "{summary}",
                {"summary": summary, "failures": failures},
            )
        return self


def field_errors(exc: ValidationError) -> list[FieldError]:
    """Flatten a ``ValidationError`` into one ``FieldError`` per failed field.

    Rule failures expand into their individual fields; any other pydantic
    error becomes a single record tagged with its error type.
    """
    errors: list[FieldError] = []
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        if err["type"] != RULE_FAILED:
            errors.append(
                FieldError(
                    namespace=".".join(loc),
                    field=loc[-1] if loc else "",
                    tag=err["type"],
                    value=err.get("input"),
                )
            )
            continue
        for failure in err["ctx"]["failures"]:
            errors.append(
                FieldError(
                    namespace=".".join([*loc, failure["field"]]),
                    field=failure["field"],
                    tag=failure["rule"],
                    param=failure["param"],
                    value=failure["value"],
                    kind=failure["kind"],
                )
            )
    return errors


def _registry_from(context: Any) -> RuleRegistry:
    if isinstance(context, Mapping):
        registry = context.get(RULES_CONTEXT_KEY)
        if isinstance(registry, RuleRegistry):
            return registry
    return default_registry()
