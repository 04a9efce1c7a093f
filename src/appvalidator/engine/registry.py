"""RuleRegistry: named rule functions that ``Rule`` markers refer to.

Models look rules up by name at validation time, either in the registry
passed through the pydantic validation context or in the process-wide
default registry, which holds the built-in rules.
"""

from __future__ import annotations

import functools
import logging
import threading

from appvalidator.engine.errors import UnknownRuleError
from appvalidator.engine.field_level import RuleFunc, RuleSpec

# Characters a rule name may not contain
RESERVED_CHARS = frozenset(",=| ")

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Registry of named rules.

    Registration is serialized with a lock; lookups only read the mapping
    and may run concurrently.
    """

    def __init__(self) -> None:
        self._rules: dict[str, RuleSpec] = {}
        self._lock = threading.Lock()

    def register_validation(
        self,
        name: str,
        func: RuleFunc,
        *,
        call_even_if_null: bool = False,
    ) -> None:
        """Register *func* under *name*.

        Raises:
            ValueError: If the name is empty, contains reserved
                characters, or is already taken.
        """
        if not name:
            msg = "Rule name must not be empty"
            raise ValueError(msg)
        if RESERVED_CHARS & set(name):
            msg = f"Rule name {name!r} contains reserved characters"
            raise ValueError(msg)

        with self._lock:
            if name in self._rules:
                msg = f"Rule {name!r} is already registered"
                raise ValueError(msg)
            self._rules[name] = RuleSpec(func, call_even_if_null=call_even_if_null)
        logger.debug("Registered rule: %s", name)

    def has_validation(self, name: str) -> bool:
        return name in self._rules

    def rule_names(self) -> list[str]:
        """Registered rule names, sorted."""
        return sorted(self._rules)

    def get(self, name: str) -> RuleSpec:
        """Look up a rule.

        Raises:
            UnknownRuleError: If nothing is registered under *name*.
        """
        try:
            return self._rules[name]
        except KeyError:
            msg = f"Undefined rule {name!r}"
            raise UnknownRuleError(msg) from None


@functools.cache
def default_registry() -> RuleRegistry:
    """Registry with the built-in rules, used when no other is supplied."""
    from appvalidator.rules import with_custom

    registry = RuleRegistry()
    with_custom(registry)
    return registry
