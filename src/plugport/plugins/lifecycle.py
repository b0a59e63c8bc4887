"""The ``initialize`` lifecycle of a plugin.

:class:`PluginLifecycle` runs inside the plugin's own process when the user
types ``<plugin> initialize [<path to plugin>]``. It walks a fixed, linear
sequence of states::

    START -> ENSURE_DIRECTORY -> INSTALL_BINARY -> VERIFY_BINARY
          -> GENERATE_DEFINITION -> MAYBE_CONFIGURE -> DONE

Any :class:`~plugport.exceptions.PluginError` aborts the sequence; nothing
is retried. All collaborators (console, serializer, dispatcher, store) are
passed in explicitly.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

import click

from plugport.console import Console
from plugport.exceptions import ArtifactMissingError, InvalidUsageError
from plugport.models import PluginDefinition
from plugport.plugins.installer import PluginInstaller
from plugport.plugins.introspection import Introspectable, introspect
from plugport.plugins.serializer import DefinitionSerializer
from plugport.plugins.store import PluginStore

logger = logging.getLogger(__name__)

CONFIGURE_COMMAND = "configure"

NO_CONFIGURE_MESSAGE = (
    "Configuration is no longer performed during 'initialize'; it moved to "
    "'configure'. Plugin '{name}' does not declare a 'configure' subcommand."
)


class LifecycleState(str, enum.Enum):
    """States of :meth:`PluginLifecycle.initialize`, in order."""

    START = "start"
    ENSURE_DIRECTORY = "ensure_directory"
    INSTALL_BINARY = "install_binary"
    VERIFY_BINARY = "verify_binary"
    GENERATE_DEFINITION = "generate_definition"
    MAYBE_CONFIGURE = "maybe_configure"
    DONE = "done"


class Dispatcher(Protocol):
    """Executes a command line against the plugin's top-level command."""

    def execute(self, *args: str) -> int: ...


class CommandDispatcher:
    """:class:`Dispatcher` backed by a click command.

    Runs the command as if the user had typed ``<prog_name> *args``.

    Args:
        command: The plugin's top-level click command.
        prog_name: Program name shown in usage and error messages.
    """

    def __init__(self, command: click.Command, prog_name: str) -> None:
        self._command = command
        self._prog_name = prog_name

    def execute(self, *args: str) -> int:
        try:
            result = self._command.main(
                args=list(args), prog_name=self._prog_name, standalone_mode=False
            )
        except click.exceptions.Exit as exc:
            return exc.exit_code
        except click.ClickException as exc:
            exc.show()
            return exc.exit_code
        except click.Abort:
            return 1
        return result if isinstance(result, int) else 0


class PluginLifecycle:
    """Installs, describes, and configures one plugin.

    Args:
        store: The managed plugin directory.
        console: Status line output and the overwrite prompt.
        serializer: Persists the generated definition.
    """

    def __init__(
        self,
        store: PluginStore,
        console: Console,
        serializer: Optional[DefinitionSerializer] = None,
    ) -> None:
        self.store = store
        self.console = console
        self.serializer = serializer or DefinitionSerializer()
        self.installer = PluginInstaller(store)
        self.states: list[LifecycleState] = []

    def initialize(
        self,
        root: Introspectable,
        plugin_name: str,
        plugin_path: Optional[Union[str, Path]],
        dispatcher: Dispatcher,
    ) -> PluginDefinition:
        """Run the full ``initialize`` sequence.

        Args:
            root: The plugin's top-level command.
            plugin_name: Name taken from the plugin's top-level command.
            plugin_path: Optional path to the plugin binary. Only absolute
                paths are installed; otherwise the plugin must already be
                in the managed directory.
            dispatcher: Used to hand off to ``configure``.

        Returns:
            The definition that was written.

        Raises:
            InvalidUsageError: If *plugin_name* is empty or contains a path
                separator.
            DirectoryCreationError: If the managed directory cannot be created.
            ArtifactMissingError: If the binary is absent after installing.
            SerializationError: If the definition cannot be written.
        """
        self.states = [LifecycleState.START]
        if not plugin_name or "/" in plugin_name or "\\" in plugin_name:
            raise InvalidUsageError(f"Invalid plugin name: '{plugin_name}'")

        self._enter(LifecycleState.ENSURE_DIRECTORY)
        logger.debug("Creating directories")
        self.store.ensure_directory()

        self.console.out(f"Initializing plugin '{plugin_name}'")

        self._enter(LifecycleState.INSTALL_BINARY)
        source = plugin_path if plugin_path is not None else plugin_name
        self.installer.install(source, plugin_name, self.console.prompt)

        self._enter(LifecycleState.VERIFY_BINARY)
        ref = self.store.ref(plugin_name)
        if not ref.is_installed:
            raise ArtifactMissingError(f"{ref.binary} does not exist")

        self._enter(LifecycleState.GENERATE_DEFINITION)
        logger.info("Generating/updating plugin file for '%s'", plugin_name)
        definition = introspect(root, plugin_name)
        self.serializer.write(definition, ref.definition)
        self.console.out(f"Plugin definition written to {ref.definition}")

        self._enter(LifecycleState.MAYBE_CONFIGURE)
        if any(child.name == CONFIGURE_COMMAND for child in root.children):
            dispatcher.execute(CONFIGURE_COMMAND)
        else:
            self.console.out(NO_CONFIGURE_MESSAGE.format(name=plugin_name))

        self._enter(LifecycleState.DONE)
        return definition

    def _enter(self, state: LifecycleState) -> None:
        logger.debug("initialize: %s", state.value)
        self.states.append(state)
