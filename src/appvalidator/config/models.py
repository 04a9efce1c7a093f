"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, appvalidator.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class RulesConfig(BaseModel):
    """[rules] section."""

    model_config = {"frozen": True}

    disabled: list[str] = Field(default_factory=list)

    @field_validator("disabled")
    @classmethod
    def _names_not_blank(cls, value: list[str]) -> list[str]:
        if any(not name.strip() for name in value):
            msg = "disabled rule names must not be blank"
            raise ValueError(msg)
        return value


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".appvalidator/plugins"
    disabled: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    rules: RulesConfig = Field(default_factory=RulesConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
