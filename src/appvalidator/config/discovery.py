"""Config file discovery and loading.

Configuration lives either in ``appvalidator.toml`` or in the
``[tool.appvalidator]`` table of a ``pyproject.toml``. The nearest directory
(walking up from the start directory) that has either wins; within one
directory ``appvalidator.toml`` takes precedence. The APPVALIDATOR_CONFIG env
var and the --config CLI flag bypass discovery.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from appvalidator.config.models import AppConfig

CONFIG_FILENAME = "appvalidator.toml"
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TABLE = ("tool", "appvalidator")
CONFIG_ENV_VAR = "APPVALIDATOR_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    Returns the path to the config file, or None if not found.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
    return None


def read_config_table(path: Path) -> dict[str, Any]:
    """Parse *path* and return the appvalidator settings table.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name != PYPROJECT_FILENAME:
        return data
    for key in PYPROJECT_TABLE:
        data = data.get(key, {})
        if not isinstance(data, dict):
            return {}
    return data


def load_config(path: Path | None = None, cwd: Path | None = None) -> AppConfig:
    """Load and validate config; defaults when no file is found."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return AppConfig()
    return AppConfig.model_validate(read_config_table(path))


def _has_tool_table(pyproject: Path) -> bool:
    try:
        return bool(read_config_table(pyproject))
    except tomllib.TOMLDecodeError:
        return False
