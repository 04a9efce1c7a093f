"""Tests for the max_without rule evaluator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from appvalidator.domain.kinds import FieldValue
from appvalidator.engine.errors import RegistrationError
from appvalidator.engine.field_level import FieldLevel
from appvalidator.engine.registry import RuleRegistry
from appvalidator.rules import RULE_NAME, with_custom
from appvalidator.rules.max_without import max_without, split_params


@dataclass
class Sibling:
    name: str = ""
    tags: list[str] | None = None


def _level(value: Any, param: str, parent: Any = None) -> FieldLevel:
    return FieldLevel(
        parent=FieldValue(parent),
        field=FieldValue(value),
        field_name="limit",
        rule=RULE_NAME,
        param=param,
    )


class TestSplitParams:
    def test_threshold_only(self) -> None:
        assert split_params("10") == ([], "10")

    def test_paths_and_threshold(self) -> None:
        paths, threshold = split_params("filters.name query 1000")
        assert paths == [["filters", "name"], ["query"]]
        assert threshold == "1000"

    def test_double_space_gives_empty_path(self) -> None:
        paths, threshold = split_params("name  10")
        assert paths == [["name"], [""]]
        assert threshold == "10"


class TestMaxWithout:
    def test_no_dependencies_within(self) -> None:
        assert max_without(_level(9, "10")) is True

    def test_no_dependencies_exceeds(self) -> None:
        assert max_without(_level(11, "10")) is False

    def test_present_dependency_waives(self) -> None:
        assert max_without(_level(11, "name 10", Sibling(name="x"))) is True

    def test_absent_dependency_applies_max(self) -> None:
        assert max_without(_level(11, "name 10", Sibling(name=""))) is False

    def test_any_dependency_is_enough(self) -> None:
        parent = Sibling(tags=["a"])
        assert max_without(_level(11, "name tags 10", parent)) is True

    @pytest.mark.parametrize(("threshold", "expected"), [("2", False), ("3", True)])
    def test_string_threshold(self, threshold: str, expected: bool) -> None:
        assert max_without(_level("abc", threshold)) is expected

    def test_dependencies_resolve_against_parent_not_field(self) -> None:
        field = Sibling(name="x")
        assert max_without(_level(field, "name 10", Sibling())) is False

    def test_double_space_dependency_is_absent(self) -> None:
        assert max_without(_level(11, "name  10", Sibling(name=""))) is False


class TestWithCustom:
    def test_registers_rule(self) -> None:
        registry = RuleRegistry()
        with_custom(registry)
        assert registry.has_validation(RULE_NAME)

    def test_second_registration_fails(self, registry: RuleRegistry) -> None:
        with pytest.raises(RegistrationError, match="register validation"):
            with_custom(registry)
