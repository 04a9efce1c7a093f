"""Built-in rule pack: ``max_without``."""

from __future__ import annotations

import pluggy

from appvalidator.engine.field_level import RuleSpec
from appvalidator.rules.max_without import RULE_NAME, max_without

hookimpl = pluggy.HookimplMarker("appvalidator")

BUILTIN_PLUGIN_NAME = "builtin-rules"


class BuiltinRulesPlugin:
    """Contributes the rules defined in :mod:`appvalidator.rules`."""

    @hookimpl
    def register_validations(self) -> dict[str, RuleSpec]:
        return {RULE_NAME: RuleSpec(max_without)}
