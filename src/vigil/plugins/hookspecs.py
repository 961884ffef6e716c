"""pluggy hook specifications for vigil plugins.

Packages contribute plugin factories by implementing these hooks. The
plugin manager calls them to assemble a PluginRegistry.

Usage (implementing a plugin package):
    from vigil.plugins.hookspecs import hookimpl

    class MyPlugins:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def vigil_get_plugin_factories(self):
            return {"postcode": postcode_factory}

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from vigil.contracts.views import PluginFactory

# Project name for pluggy
PROJECT_NAME = "vigil"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class VigilPluginSpec:
    """Hook specifications for validation plugin factories."""

    @hookspec
    def vigil_get_plugin_factories(self) -> dict[str, "PluginFactory"]:  # type: ignore[empty-body]
        """Return plugin factories keyed by plugin type.

        Returns:
            Mapping of plugin type (the ``type`` field of a plugin config)
            to factory
        """
