"""appvalidator: the ``max_without`` conditional validation rule.

A field must not exceed a threshold unless one of its sibling (or nested)
dependency fields is non-empty. Rules run as part of pydantic validation::

    from appvalidator import Rule, RuleModel, Uint

    class Search(RuleModel):
        limit: Annotated[Uint | None, Rule("max_without", "filters.name 1000")] = None
        filters: Filters = Filters()

    Search(limit=5000)  # raises pydantic.ValidationError (rule_failed)
"""

__version__ = "0.1.0"

from appvalidator.domain.kinds import FieldValue, Uint, ValueKind  # noqa: E402
from appvalidator.engine import (  # noqa: E402
    FieldError,
    FieldLevel,
    RegistrationError,
    Rule,
    RuleModel,
    RuleRegistry,
    RuleSpec,
    UnknownRuleError,
    default_registry,
    field_errors,
)
from appvalidator.rules import is_present, is_within_max, max_without, with_custom  # noqa: E402

__all__ = [
    "FieldError",
    "FieldLevel",
    "FieldValue",
    "RegistrationError",
    "Rule",
    "RuleModel",
    "RuleRegistry",
    "RuleSpec",
    "Uint",
    "UnknownRuleError",
    "ValueKind",
    "__version__",
    "default_registry",
    "field_errors",
    "is_present",
    "is_within_max",
    "max_without",
    "with_custom",
]
