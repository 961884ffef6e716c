# src/vigil/plugins/manager.py
"""Plugin manager for discovery and registration.

Uses pluggy for hook-based registration of plugin factories. The manager
is a build-time object: once every package is registered, build_registry()
produces the immutable PluginRegistry that validators use.
"""

from typing import Any

import pluggy

from vigil.contracts.views import PluginFactory
from vigil.core.logging import get_logger
from vigil.plugins.hookspecs import PROJECT_NAME, VigilPluginSpec
from vigil.plugins.registry import PluginRegistry

logger = get_logger(__name__)


class PluginManager:
    """Collects plugin factories contributed through pluggy hooks.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()
        manager.register(MyPlugins())

        registry = manager.build_registry()
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(VigilPluginSpec)

        # Cache - maps plugin type to factory for duplicate detection
        self._factories: dict[str, PluginFactory] = {}

    def register_builtin_plugins(self) -> None:
        """Register the factories shipped with vigil (see vigil.plugins.builtin)."""
        from vigil.plugins import builtin

        self.register(builtin)

    def register(self, plugin: Any) -> None:
        """Register a plugin package.

        Args:
            plugin: Object or module implementing hook methods

        Raises:
            ValueError: If a plugin type is already provided by another package
        """
        self._pm.register(plugin)
        try:
            self._refresh_cache()
        except ValueError:
            self._pm.unregister(plugin)
            raise
        logger.debug("plugin_package_registered", package=self._pm.get_name(plugin))

    def _refresh_cache(self) -> None:
        """Refresh the factory cache from hooks.

        Raises:
            ValueError: If two packages register the same plugin type
        """
        factories: dict[str, PluginFactory] = {}
        for contributed in self._pm.hook.vigil_get_plugin_factories():
            for plugin_type, factory in contributed.items():
                if plugin_type in factories:
                    raise ValueError(f"Duplicate plugin type: '{plugin_type}'")
                factories[plugin_type] = factory

        self._factories = factories

    def get_plugin_types(self) -> list[str]:
        """Get all registered plugin types, sorted."""
        return sorted(self._factories)

    def get_factory_by_type(self, plugin_type: str) -> PluginFactory | None:
        """Get a factory by plugin type."""
        return self._factories.get(plugin_type)

    def build_registry(self) -> PluginRegistry:
        """Freeze the currently registered factories into a PluginRegistry."""
        return PluginRegistry(self._factories)
