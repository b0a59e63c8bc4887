"""Plugin subsystem for plugport -- install, describe, and load plugins.

A plugin is a separate executable that exposes a hidden ``initialize``
subcommand (see :mod:`plugport.sdk`). Installing it copies the binary into
the managed plugin directory and writes a ``<name>.plugin`` definition
describing its command tree; at startup the host CLI reads those
definitions and registers one passthrough command per plugin.

Key classes:

* :class:`PluginStore` -- Path resolution for the managed directory.
* :class:`PluginInstaller` -- Copies binaries in, with overwrite prompts.
* :class:`PluginLifecycle` -- The ``initialize`` state machine.
* :class:`PluginLoader` -- Startup discovery and registration.
* :func:`introspect` -- Describes a command tree as a
  :class:`~plugport.models.PluginDefinition`.
"""

from plugport.plugins.installer import PluginInstaller
from plugport.plugins.introspection import ClickCommandSpec, Introspectable, introspect
from plugport.plugins.lifecycle import CommandDispatcher, LifecycleState, PluginLifecycle
from plugport.plugins.loader import LoadedPlugin, PluginCommand, PluginLoader
from plugport.plugins.serializer import DefinitionSerializer
from plugport.plugins.store import PluginStore

__all__ = [
    "ClickCommandSpec",
    "CommandDispatcher",
    "DefinitionSerializer",
    "Introspectable",
    "LifecycleState",
    "LoadedPlugin",
    "PluginCommand",
    "PluginInstaller",
    "PluginLifecycle",
    "PluginLoader",
    "PluginStore",
    "introspect",
]
