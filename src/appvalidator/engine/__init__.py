"""Rule registry and the pydantic hook that applies rules to models."""

from appvalidator.engine.errors import FieldError, RegistrationError, UnknownRuleError
from appvalidator.engine.field_level import FieldLevel, RuleFunc, RuleSpec
from appvalidator.engine.model import Rule, RuleModel, apply_rule, field_errors
from appvalidator.engine.registry import RuleRegistry, default_registry

__all__ = [
    "FieldError",
    "FieldLevel",
    "RegistrationError",
    "Rule",
    "RuleFunc",
    "RuleModel",
    "RuleRegistry",
    "RuleSpec",
    "UnknownRuleError",
    "apply_rule",
    "default_registry",
    "field_errors",
]
