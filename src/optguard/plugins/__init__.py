"""Extension layer: plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from ``.optguard/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from optguard.plugins.hookspecs import hookimpl
from optguard.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
