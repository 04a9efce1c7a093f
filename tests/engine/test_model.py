"""Tests for Rule markers applied through pydantic validation."""

from __future__ import annotations

from typing import Annotated, Any

import pytest
from pydantic import BaseModel, ValidationError

from appvalidator.domain.kinds import FieldValue, Uint
from appvalidator.engine.errors import UnknownRuleError
from appvalidator.engine.field_level import FieldLevel
from appvalidator.engine.model import (
    RULE_FAILED,
    Rule,
    RuleModel,
    apply_rule,
    extract,
    field_errors,
    rule_markers,
)
from appvalidator.engine.registry import RuleRegistry


class NestedFilters(BaseModel):
    slice_f: list[str] | None = None


class Filters(BaseModel):
    string_f: str = ""
    nested_filters: NestedFilters = NestedFilters()


class ByName(RuleModel):
    limit: Annotated[Uint | None, Rule("max_without", "filters.string_f 10")] = None
    filters: Filters = Filters()


class ByNestedSlice(RuleModel):
    limit: Annotated[Uint | None, Rule("max_without", "filters.nested_filters.slice_f 10")] = None
    filters: Filters = Filters()


class OmitEmpty(RuleModel):
    limit: Annotated[int | None, Rule("max_without", "5", omit_empty=True)] = None


class Child(RuleModel):
    size: Annotated[int, Rule("max_without", "label 3")] = 0
    label: str = ""


class ParentOfChild(RuleModel):
    child: Child = Child()


class UnknownRule(RuleModel):
    limit: Annotated[int, Rule("no_such_rule", "1")] = 0


class TwoFields(RuleModel):
    first: Annotated[int, Rule("max_without", "1")] = 0
    second: Annotated[str, Rule("max_without", "2")] = ""


class Marked(RuleModel):
    value: Annotated[int, Rule("first"), Rule("second")] = 0


class Record(RuleModel):
    value: Annotated[Any, Rule("record", "x")] = None


LIMIT = 20


def _rule_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [err for err in exc.errors() if err["type"] == RULE_FAILED]


class TestRuleModel:
    @pytest.mark.parametrize(
        ("data", "want_err"),
        [
            ({"limit": LIMIT, "filters": {"string_f": "a"}}, False),
            ({"limit": LIMIT, "filters": {"string_f": ""}}, True),
        ],
        ids=[
            "great than max with not empty dependency",
            "great than max with empty dependency",
        ],
    )
    def test_by_name(self, data: dict[str, Any], want_err: bool) -> None:
        if want_err:
            with pytest.raises(ValidationError):
                ByName.model_validate(data)
        else:
            ByName.model_validate(data)

    @pytest.mark.parametrize(
        ("slice_f", "want_err"),
        [(["abc"], False), ([], True)],
        ids=[
            "great than max with not empty nested dependency",
            "great than max with empty nested dependency",
        ],
    )
    def test_by_nested_slice(self, slice_f: list[str], want_err: bool) -> None:
        data = {"limit": LIMIT, "filters": {"nested_filters": {"slice_f": slice_f}}}
        if want_err:
            with pytest.raises(ValidationError):
                ByNestedSlice.model_validate(data)
        else:
            ByNestedSlice.model_validate(data)

    def test_within_max_passes(self) -> None:
        assert ByName(limit=10).limit == 10

    def test_none_limit_fails(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ByName(limit=None)
        [err] = _rule_errors(exc_info.value)
        assert err["ctx"]["failures"][0]["rule"] == "max_without"

    def test_error_details(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ByName(limit=LIMIT)
        [err] = _rule_errors(exc_info.value)
        assert err["loc"] == ()
        assert err["msg"] == "Field validation for 'limit' failed on the 'max_without' tag"
        [failure] = err["ctx"]["failures"]
        assert failure["field"] == "limit"
        assert failure["param"] == "filters.string_f 10"
        assert failure["value"] == LIMIT
        assert failure["kind"] == "uint"

    def test_all_failing_fields_reported(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TwoFields(first=5, second="abc")
        [err] = _rule_errors(exc_info.value)
        assert [f["field"] for f in err["ctx"]["failures"]] == ["first", "second"]
        assert "'first'" in err["msg"]
        assert "'second'" in err["msg"]

    def test_field_types_validated_first(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ByName(limit=-1)
        assert _rule_errors(exc_info.value) == []

    def test_omit_empty_skips_zero(self) -> None:
        OmitEmpty()
        OmitEmpty(limit=0)
        with pytest.raises(ValidationError):
            OmitEmpty(limit=6)

    def test_nested_model_parent_is_immediate(self) -> None:
        ParentOfChild.model_validate({"child": {"size": 10, "label": "x"}})
        with pytest.raises(ValidationError) as exc_info:
            ParentOfChild.model_validate({"child": {"size": 10}})
        [err] = _rule_errors(exc_info.value)
        assert err["loc"] == ("child",)

    def test_unknown_rule_raises(self) -> None:
        with pytest.raises(UnknownRuleError):
            UnknownRule()

    def test_registry_from_context(self) -> None:
        registry = RuleRegistry()
        registry.register_validation("max_without", lambda fl: fl.field.value % 2 == 0)
        ByName.model_validate({"limit": 500}, context={"rules": registry})
        with pytest.raises(ValidationError):
            ByName.model_validate({"limit": 5}, context={"rules": registry})

    def test_context_without_registry_uses_default(self) -> None:
        ByName.model_validate({"limit": 5}, context={"other": 1})

    def test_first_failure_stops_field(self) -> None:
        calls: list[str] = []

        def failing(fl: FieldLevel) -> bool:
            calls.append(fl.rule)
            return False

        registry = RuleRegistry()
        registry.register_validation("first", failing)
        registry.register_validation("second", failing)
        with pytest.raises(ValidationError) as exc_info:
            Marked.model_validate({"value": 1}, context={"rules": registry})
        assert calls == ["first"]
        [err] = _rule_errors(exc_info.value)
        assert len(err["ctx"]["failures"]) == 1

    def test_call_even_if_null(self) -> None:
        seen: list[FieldLevel] = []

        def record(fl: FieldLevel) -> bool:
            seen.append(fl)
            return True

        registry = RuleRegistry()
        registry.register_validation("record", record, call_even_if_null=True)
        Record.model_validate({}, context={"rules": registry})
        assert seen[0].field.value is None
        assert seen[0].param == "x"
        assert seen[0].field_name == "value"
        assert isinstance(seen[0].parent.value, Record)

    def test_null_fails_without_call_even_if_null(self) -> None:
        registry = RuleRegistry()
        registry.register_validation("record", lambda fl: pytest.fail("should not be called"))
        with pytest.raises(ValidationError):
            Record.model_validate({}, context={"rules": registry})


class TestApplyRule:
    def test_dependency_waives_max(self, registry: RuleRegistry) -> None:
        rule = Rule("max_without", "name 10")
        field = FieldValue(50)
        assert apply_rule(
            registry, rule, field, parent=FieldValue({"name": "x"}), field_name="v"
        )
        assert not apply_rule(
            registry, rule, field, parent=FieldValue({"name": ""}), field_name="v"
        )

    def test_without_parent(self, registry: RuleRegistry) -> None:
        rule = Rule("max_without", "2")
        assert apply_rule(registry, rule, FieldValue("ab"), parent=FieldValue(None), field_name="v")
        assert not apply_rule(
            registry, rule, FieldValue("abc"), parent=FieldValue(None), field_name="v"
        )

    def test_none_sequence_is_checked(self, registry: RuleRegistry) -> None:
        field = FieldValue(None, list[int] | None)
        assert apply_rule(
            registry, Rule("max_without", "0"), field, parent=FieldValue(None), field_name="v"
        )

    def test_unknown_rule(self, registry: RuleRegistry) -> None:
        with pytest.raises(UnknownRuleError):
            apply_rule(
                registry, Rule("nope"), FieldValue(1), parent=FieldValue(None), field_name="v"
            )


class TestHelpers:
    def test_rule_markers(self) -> None:
        info = Marked.model_fields["value"]
        assert rule_markers(info) == [Rule("first"), Rule("second")]
        assert rule_markers(Filters.model_fields["string_f"]) == []

    def test_extract_uses_runtime_kind_for_any(self) -> None:
        assert extract(FieldValue([1, 2], Any)).kind.value == "sequence"
        assert extract(FieldValue(3, int | None)).declared is int

    def test_field_errors_flatten_rule_failures(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ParentOfChild.model_validate({"child": {"size": 10}})
        [err] = field_errors(exc_info.value)
        assert err.namespace == "child.size"
        assert err.field == "size"
        assert err.tag == "max_without"
        assert err.param == "label 3"
        assert err.value == 10
        assert err.kind == "int"
        assert "failed on the 'max_without' tag" in err.message()

    def test_field_errors_keep_pydantic_errors(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ByName(limit=-1)
        [err] = field_errors(exc_info.value)
        assert err.namespace == "limit"
        assert err.tag == "greater_than_equal"
