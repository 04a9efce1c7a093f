"""Extension layer: rule packs via pluggy.

Discovery: entry_points (pip-installed) plus a local plugin directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from appvalidator.plugins.manager import PluginManager

__all__ = ["PluginManager"]
