"""Immutable lookup table from plugin type to plugin factory."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from vigil.contracts.errors import PluginNotFoundError
from vigil.contracts.views import PluginFactory


class PluginRegistry:
    """Maps plugin type identifiers to plugin factories.

    The mapping is copied on construction and cannot be changed afterwards;
    build a new registry (or use PluginManager.build_registry()) to add
    types.

    Example:
        registry = PluginRegistry({"empty": empty_factory})
        factory = registry.get_factory("empty")
    """

    def __init__(self, factories: Mapping[str, PluginFactory]) -> None:
        self._factories: Mapping[str, PluginFactory] = MappingProxyType(dict(factories))

    def __contains__(self, key: object) -> bool:
        return key in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def get_factory(self, key: str) -> PluginFactory:
        """Return the factory registered for key.

        Raises:
            PluginNotFoundError: If no factory is registered for key
        """
        if not self.has_factory(key):
            raise PluginNotFoundError(f"Plugin '{key}' not found")
        return self._factories[key]

    def has_factory(self, key: object) -> bool:
        """Whether a factory is registered for key."""
        return key in self._factories


def define_registry(factories: Mapping[str, PluginFactory]) -> PluginRegistry:
    """Build a PluginRegistry from a mapping of factories."""
    return PluginRegistry(factories)
