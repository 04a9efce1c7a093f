"""Rule pack discovery, loading, and installation onto a RuleRegistry.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.appvalidator/plugins/``.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from appvalidator.engine.field_level import RuleSpec
from appvalidator.plugins.hookspecs import AppValidatorHookSpec

if TYPE_CHECKING:
    from appvalidator.engine.registry import RuleRegistry

PROJECT_NAME = "appvalidator"
ENTRY_POINT_GROUP = "appvalidator.rules"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages rule pack discovery, loading, and rule collection."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(AppValidatorHookSpec)
        self._loaded: bool = False

    def discover_and_load(
        self,
        *,
        local_dir: Path | None = None,
        disabled: Iterable[str] = (),
    ) -> list[str]:
        """Discover rule packs from entry points and an optional local directory.

        Packs named in *disabled* are blocked before loading. Returns the
        names of all registered packs.
        """
        for name in disabled:
            self._pm.set_blocked(name)
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. the built-in pack)."""
        resolved_name = name or plugin.__class__.__name__
        if self._pm.is_blocked(resolved_name):
            logger.debug("Skipping blocked plugin: %s", resolved_name)
            return
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        """Return all registered plugins in registration order."""
        return [plugin for _name, plugin in self._registered()]

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins in registration order."""
        return [name for name, _plugin in self._registered()]

    def _registered(self) -> list[tuple[str, object]]:
        # pluggy keeps blocked names as None placeholders
        return [
            (name, plugin) for name, plugin in self._pm.list_name_plugin() if plugin is not None
        ]

    # ------------------------------------------------------------------
    # Rule collection
    # ------------------------------------------------------------------

    def collect_rules(self) -> dict[str, RuleSpec]:
        """Gather rules from every registered pack.

        The first pack to claim a name keeps it; later claims are skipped
        with a warning. Malformed registrations are skipped the same way.
        """
        rules: dict[str, RuleSpec] = {}
        owners: dict[str, str] = {}
        for plugin_name, plugin in self._registered():
            for rule_name, spec in self._plugin_rules(plugin, plugin_name):
                if rule_name in rules:
                    logger.warning(
                        "Rule %r from plugin %s conflicts with plugin %s; skipping",
                        rule_name,
                        plugin_name,
                        owners[rule_name],
                    )
                    continue
                rules[rule_name] = spec
                owners[rule_name] = plugin_name
        return rules

    def install(self, registry: RuleRegistry, *, exclude: Iterable[str] = ()) -> list[str]:
        """Register every collected rule on *registry*.

        Names in *exclude* are left out. Names the registry rejects (already
        registered, reserved characters) are skipped with a warning.
        Returns the names that were installed.
        """
        excluded = set(exclude)
        installed: list[str] = []
        for rule_name, spec in self.collect_rules().items():
            if rule_name in excluded:
                logger.debug("Rule %s disabled by configuration", rule_name)
                continue
            try:
                registry.register_validation(
                    rule_name,
                    spec.func,
                    call_even_if_null=spec.call_even_if_null,
                )
            except ValueError:
                logger.warning("Skipping rule registration %r", rule_name, exc_info=True)
                continue
            installed.append(rule_name)
        return installed

    @staticmethod
    def _plugin_rules(plugin: object, plugin_name: str) -> list[tuple[str, RuleSpec]]:
        """Rules exposed by a single plugin instance, normalized to RuleSpec."""
        hook = getattr(plugin, "register_validations", None)
        if hook is None:
            return []

        try:
            rule_map = hook()
        except Exception:
            logger.warning(
                "Failed to collect rules from plugin %s",
                plugin_name,
                exc_info=True,
            )
            return []

        if rule_map is None:
            return []
        if not isinstance(rule_map, dict):
            logger.warning("Plugin %s returned non-dict rule registrations", plugin_name)
            return []

        collected: list[tuple[str, RuleSpec]] = []
        for rule_name, entry in rule_map.items():
            if isinstance(entry, RuleSpec):
                collected.append((rule_name, entry))
            elif callable(entry):
                collected.append((rule_name, RuleSpec(entry)))
            else:
                logger.warning(
                    "Skipping rule %r from plugin %s: not callable",
                    rule_name,
                    plugin_name,
                )
        return collected

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file rule packs.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised. A broken local pack
        must not prevent the built-in rules from loading.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"appvalidator_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue  # skip imported classes
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self.register_plugin(instance, name=module_name)
                    logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry points usually name a class; hook calls on a class object
        would leave ``self`` unbound.
        """
        for plugin_name, plugin in self._registered():
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("appvalidator")`` sets an
        ``appvalidator_impl`` attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "appvalidator_impl", None):
                return True
        return False
