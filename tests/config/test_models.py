"""Tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from appvalidator.config.models import AppConfig, PluginsConfig, RulesConfig


class TestDefaults:
    def test_rules_defaults(self) -> None:
        assert RulesConfig().disabled == []

    def test_plugins_defaults(self) -> None:
        cfg = PluginsConfig()
        assert cfg.enabled is True
        assert cfg.local_dir == ".appvalidator/plugins"
        assert cfg.disabled == []

    def test_app_config_composes_sections(self) -> None:
        cfg = AppConfig()
        assert cfg.rules == RulesConfig()
        assert cfg.plugins == PluginsConfig()


class TestValidation:
    def test_sparse_override(self) -> None:
        cfg = AppConfig.model_validate({"plugins": {"disabled": ["builtin-rules"]}})
        assert cfg.plugins.disabled == ["builtin-rules"]
        assert cfg.plugins.enabled is True
        assert cfg.rules.disabled == []

    def test_blank_rule_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be blank"):
            RulesConfig(disabled=["max_without", "  "])

    def test_frozen(self) -> None:
        cfg = RulesConfig()
        with pytest.raises(ValidationError):
            cfg.disabled = ["other"]  # type: ignore[misc]
