"""Built-in rules and their registration on a RuleRegistry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from appvalidator.engine.errors import RegistrationError
from appvalidator.rules.comparator import is_within_max
from appvalidator.rules.max_without import RULE_NAME, max_without
from appvalidator.rules.resolver import is_present

if TYPE_CHECKING:
    from appvalidator.engine.registry import RuleRegistry

__all__ = ["RULE_NAME", "is_present", "is_within_max", "max_without", "with_custom"]


def with_custom(registry: RuleRegistry) -> None:
    """Register the custom rules on *registry*.

    Raises:
        RegistrationError: If a rule name is rejected (e.g. already taken).
    """
    try:
        registry.register_validation(RULE_NAME, max_without)
    except ValueError as exc:
        msg = f"register validation: {exc}"
        raise RegistrationError(msg) from exc
