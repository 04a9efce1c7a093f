"""RuleService: registry bootstrap plus the operations behind the CLI.

``build_registry`` assembles a RuleRegistry from settings: the built-in rule
pack first (so it owns its names), then any discovered packs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import ConfigDict, ValidationError, create_model

from appvalidator.domain.kinds import FieldValue, Uint
from appvalidator.domain.literals import parse_duration
from appvalidator.engine.errors import FieldError, UnknownRuleError
from appvalidator.engine.model import RULES_CONTEXT_KEY, Rule, RuleModel, apply_rule, field_errors
from appvalidator.engine.registry import RuleRegistry
from appvalidator.plugins.builtins.rules import BUILTIN_PLUGIN_NAME, BuiltinRulesPlugin
from appvalidator.plugins.manager import PluginManager
from appvalidator.rules.max_without import RULE_NAME, split_params
from appvalidator.rules.resolver import is_present
from appvalidator.services.result import ServiceResult

if TYPE_CHECKING:
    from appvalidator.config.settings import AppSettings

logger = logging.getLogger(__name__)

# Kinds the CLI can force on a decoded JSON value
VALUE_KINDS = ("auto", "uint", "int", "float", "string", "duration", "timestamp")

_JSON_SCALARS = (str, int, float, bool, type(None))


class DocumentModel(RuleModel):
    """Base for per-call document models; unmarked keys are kept as extras."""

    model_config = ConfigDict(extra="allow")


def build_registry(settings: AppSettings | None = None) -> tuple[RuleRegistry, PluginManager]:
    """Create a RuleRegistry with the built-in rules and any enabled rule packs."""
    registry = RuleRegistry()
    manager = PluginManager()

    disabled: list[str] = list(settings.plugins.disabled) if settings else []
    if BUILTIN_PLUGIN_NAME not in disabled:
        manager.register_plugin(BuiltinRulesPlugin(), name=BUILTIN_PLUGIN_NAME)

    if settings is not None and settings.plugins.enabled:
        names = manager.discover_and_load(
            local_dir=settings.local_plugin_dir,
            disabled=disabled,
        )
        logger.debug("Loaded rule packs: %s", ", ".join(names))

    excluded = settings.rules.disabled if settings else []
    installed = manager.install(registry, exclude=excluded)
    logger.debug("Installed rules: %s", ", ".join(installed))
    return registry, manager


def coerce_value(value: Any, kind: str = "auto") -> FieldValue:
    """Attach a declared kind to a JSON-decoded value.

    Raises:
        ValueError: If *value* cannot represent *kind*.
    """
    match kind:
        case "auto":
            return FieldValue(value)
        case "uint":
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                msg = f"expected a non-negative integer, got {value!r}"
                raise ValueError(msg)
            return FieldValue(value, Uint)
        case "int":
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"expected an integer, got {value!r}"
                raise ValueError(msg)
            return FieldValue(value, int)
        case "float":
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                msg = f"expected a number, got {value!r}"
                raise ValueError(msg)
            try:
                return FieldValue(float(value), float)
            except OverflowError as exc:
                msg = f"expected a number in float range, got {value!r}"
                raise ValueError(msg) from exc
        case "string":
            if not isinstance(value, str):
                msg = f"expected a string, got {value!r}"
                raise ValueError(msg)
            return FieldValue(value, str)
        case "duration":
            if isinstance(value, str):
                value = parse_duration(value)
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"expected nanoseconds or a duration string, got {value!r}"
                raise ValueError(msg)
            return FieldValue(value, timedelta)
        case "timestamp":
            if not isinstance(value, str):
                msg = f"expected an RFC 3339 timestamp string, got {value!r}"
                raise ValueError(msg)
            return FieldValue(datetime.fromisoformat(value), datetime)
        case _:
            msg = f"unknown value kind {kind!r}"
            raise ValueError(msg)


class RuleService:
    """Evaluate rules and list the registry for the CLI."""

    def __init__(self, registry: RuleRegistry, plugins: PluginManager | None = None) -> None:
        self._registry = registry
        self._plugins = plugins

    @classmethod
    def from_settings(cls, settings: AppSettings) -> RuleService:
        registry, plugins = build_registry(settings)
        return cls(registry, plugins)

    def list_rules(self) -> ServiceResult:
        plugins = self._plugins.list_plugin_names() if self._plugins else []
        return ServiceResult(
            ok=True,
            op="rules",
            data={"rules": self._registry.rule_names(), "plugins": plugins},
        )

    def evaluate(
        self,
        param: str,
        value: Any,
        *,
        parent: Any = None,
        kind: str = "auto",
    ) -> ServiceResult:
        """Evaluate ``max_without=<param>`` once against *value* and *parent*."""
        op = "eval"
        try:
            field = coerce_value(value, kind)
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_VALUE", str(exc))

        paths, threshold = split_params(param)
        data: dict[str, Any] = {
            "rule": RULE_NAME,
            "param": param,
            "kind": field.kind.value,
            "threshold": threshold,
            "dependencies": [
                {"path": ".".join(path), "present": is_present(parent, path)} for path in paths
            ],
        }

        rule = Rule(RULE_NAME, param)
        try:
            passed = apply_rule(
                self._registry, rule, field, parent=FieldValue(parent), field_name="value"
            )
        except UnknownRuleError as exc:
            return ServiceResult.failure(op, "UNKNOWN_RULE", str(exc), data=data)

        data["passed"] = passed
        if not passed:
            error = _field_error(rule, field)
            return ServiceResult.failure(
                op,
                "RULE_FAILED",
                f"value exceeds {threshold} and no dependency is present",
                data=data,
                detail={"errors": [_error_payload(error)]},
            )
        return ServiceResult(ok=True, op=op, data=data)

    def check_document(self, document: Any, rules: Mapping[str, Rule]) -> ServiceResult:
        """Validate top-level fields of *document* against per-field rules.

        The document becomes a pydantic model whose marked fields are the
        keys in *rules*; every other key is kept as an extra field, so
        dependency paths resolve from the document root.
        """
        op = "check"
        if not isinstance(document, Mapping):
            return ServiceResult.failure(
                op, "INVALID_DOCUMENT", "document must be a JSON object"
            )

        invalid = [name for name in rules if not name.isidentifier() or name.startswith("_")]
        if invalid:
            return ServiceResult.failure(
                op, "INVALID_FIELD", f"field names must be identifiers: {', '.join(invalid)}"
            )
        for rule in rules.values():
            if not self._registry.has_validation(rule.name):
                return ServiceResult.failure(op, "UNKNOWN_RULE", f"Undefined rule {rule.name!r}")

        model = create_model(
            "Document",
            __base__=DocumentModel,
            **{name: (Annotated[Any, rule], None) for name, rule in rules.items()},
        )
        errors: list[FieldError] = []
        try:
            model.model_validate(dict(document), context={RULES_CONTEXT_KEY: self._registry})
        except ValidationError as exc:
            errors = field_errors(exc)

        data = {"checked": len(rules), "failed": len(errors)}
        if errors:
            return ServiceResult.failure(
                op,
                "VALIDATION_FAILED",
                f"{len(errors)} of {len(rules)} field(s) failed validation",
                data={**data, "errors": [_error_payload(err) for err in errors]},
            )
        return ServiceResult(ok=True, op=op, data=data)


def _field_error(rule: Rule, field: FieldValue) -> FieldError:
    return FieldError(
        namespace="value",
        field="value",
        tag=rule.name,
        param=rule.param,
        value=field.value,
        kind=field.unwrap().kind.value,
    )


def _error_payload(err: FieldError) -> dict[str, Any]:
    payload = err.model_dump(exclude={"value"})
    value = err.value
    payload["value"] = value if _is_json_native(value) else repr(value)
    payload["message"] = err.message()
    return payload


def _is_json_native(value: Any) -> bool:
    if isinstance(value, _JSON_SCALARS):
        return True
    if isinstance(value, list):
        return all(_is_json_native(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_json_native(v) for k, v in value.items())
    return False
