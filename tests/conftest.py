"""Shared pytest fixtures for appvalidator tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from appvalidator.config.logging import LOGGER_NAME
from appvalidator.engine.registry import RuleRegistry
from appvalidator.rules import with_custom


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> RuleRegistry:
    """RuleRegistry with the built-in rules registered."""
    registry = RuleRegistry()
    with_custom(registry)
    return registry


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp directory with no config env overrides.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.chdir(tmp_path)
    for var in ("APPVALIDATOR_CONFIG", "APPVALIDATOR_PLUGINS__ENABLED"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _restore_app_logging() -> Generator[None]:
    """CLI invocations reconfigure logging; undo that after each test."""
    app = logging.getLogger(LOGGER_NAME)
    handlers = app.handlers[:]
    propagate = app.propagate
    yield
    app.handlers = handlers
    app.propagate = propagate
    app.setLevel(logging.NOTSET)
