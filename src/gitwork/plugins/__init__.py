"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins in the repository's ``.gitwork/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from gitwork.plugins.event_bus import EventBus
from gitwork.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
