"""Rule errors and the per-field failure record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class FieldError(BaseModel):
    """One rule that failed on one field."""

    model_config = {"frozen": True}

    namespace: str
    field: str
    tag: str
    param: str = ""
    value: Any = None
    kind: str = ""

    def message(self) -> str:
        return (
            f"Key: '{self.namespace}' Error:Field validation for '{self.field}' "
            f"failed on the '{self.tag}' tag"
        )


class UnknownRuleError(KeyError):
    """A field is marked with a rule that was never registered."""


class RegistrationError(RuntimeError):
    """A rule pack could not be registered."""
