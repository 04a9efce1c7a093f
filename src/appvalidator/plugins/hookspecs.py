"""Pluggy hook specifications for appvalidator rule packs.

A rule pack is any object implementing ``register_validations``. Packs are
found through the ``appvalidator.rules`` entry-point group, a local plugin
directory, or direct registration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from appvalidator.engine.field_level import RuleFunc, RuleSpec

hookspec = pluggy.HookspecMarker("appvalidator")


class AppValidatorHookSpec:
    """Hook specifications for the appvalidator plugin system."""

    @hookspec
    def register_validations(self) -> dict[str, RuleFunc | RuleSpec] | None:
        """Return rule name -> rule function (or RuleSpec) mappings."""
