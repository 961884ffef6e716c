"""Plugin system: config compilation, registries and pluggy discovery.

- Registry: immutable plugin type -> factory lookup
- Resolution: compile plugin configs into runnable plugins
- Manager/Hookspecs: pluggy-based factory discovery
- Builtin: a handful of ready-made factories
"""

from vigil.plugins.config_base import PluginConfig, PluginConfigError
from vigil.plugins.hookspecs import hookimpl, hookspec
from vigil.plugins.manager import PluginManager
from vigil.plugins.registry import PluginRegistry, define_registry
from vigil.plugins.resolution import (
    CompiledPlugin,
    check_preconditions,
    create_validation_plugin,
    get_default_result,
    get_factory_plugin,
    get_validation_result,
    get_validation_target,
    matches_target,
    resolve_validation_plugin,
)

__all__ = [
    # Config
    "PluginConfig",
    "PluginConfigError",
    # Hookspecs
    "hookimpl",
    "hookspec",
    # Manager
    "PluginManager",
    # Registry
    "PluginRegistry",
    "define_registry",
    # Resolution
    "CompiledPlugin",
    "check_preconditions",
    "create_validation_plugin",
    "get_default_result",
    "get_factory_plugin",
    "get_validation_result",
    "get_validation_target",
    "matches_target",
    "resolve_validation_plugin",
]
