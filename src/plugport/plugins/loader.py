"""Plugin loader -- attach installed plugins to the host CLI at startup.

:class:`PluginLoader` scans the managed plugin directory once, before any
user command resolves, and turns every installed binary into a
:class:`PluginCommand`. Command trees come from the persisted
``<name>.plugin`` definitions; plugin binaries are never executed at
startup.

Failures are isolated per plugin: a corrupt definition is logged and that
plugin is left out, every other plugin still loads. A binary without a
definition is "present but undescribed" and is registered as a plain
passthrough command so ``<plugin> initialize`` can still regenerate it.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Any, Optional

import click
from click.shell_completion import CompletionItem
from pydantic import BaseModel, ConfigDict

from plugport.exceptions import PluginError, PluginLoadError
from plugport.models import PluginArtifactRef, PluginDefinition, PluginsConfig
from plugport.plugins.serializer import DefinitionSerializer
from plugport.plugins.store import PluginStore

logger = logging.getLogger(__name__)


class PluginCommand(click.Command):
    """Host-side command that forwards its arguments to a plugin binary.

    Arguments are not parsed by the host: ``<host> <plugin> a b --c`` runs
    ``<binary> a b --c`` and exits with the binary's return code. ``--help``
    is forwarded as well, so the plugin renders its own help. The
    definition, when present, drives shell completion.
    """

    def __init__(self, ref: PluginArtifactRef, definition: Optional[PluginDefinition]) -> None:
        self.ref = ref
        self.definition = definition
        if definition is not None:
            help_text = definition.description or f"Commands provided by the '{ref.name}' plugin."
        else:
            help_text = (
                f"Plugin '{ref.name}' (not initialized, "
                f"run: plugport {ref.name} initialize)."
            )
        super().__init__(
            name=ref.name,
            help=help_text,
            add_help_option=False,
            context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
        )

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.args = list(args)
        return []

    def invoke(self, ctx: click.Context) -> Any:
        argv = [str(self.ref.binary), *ctx.args]
        logger.debug("Running plugin '%s': %s", self.name, argv)
        try:
            completed = subprocess.run(argv)
        except OSError as exc:
            raise PluginError(f"Cannot run plugin '{self.name}': {exc}") from exc
        ctx.exit(completed.returncode)

    def shell_complete(self, ctx: click.Context, incomplete: str) -> list[CompletionItem]:
        if self.definition is None:
            return []
        node = self.definition.find([a for a in ctx.args if not a.startswith("-")])
        if node is None:
            return []
        items = [
            CompletionItem(child.name, help=child.description or None)
            for child in node.children
            if not child.hidden and child.name.startswith(incomplete)
        ]
        if incomplete.startswith("-"):
            for option in node.options:
                if option.positional:
                    continue
                items.extend(
                    CompletionItem(flag, help=option.help or None)
                    for flag in option.names
                    if flag.startswith(incomplete)
                )
        return items


class LoadedPlugin(BaseModel):
    """A plugin ready to be registered on the host dispatcher."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    ref: PluginArtifactRef
    definition: Optional[PluginDefinition] = None
    command: PluginCommand

    @property
    def is_described(self) -> bool:
        return self.definition is not None


class PluginLoader:
    """Discovers installed plugins and builds their host commands.

    The ``enabled`` and ``disabled`` lists of
    :class:`~plugport.models.PluginsConfig` act as an explicit
    allowlist/blocklist, as for any other plugin setting.

    Example:
        Typical usage from the host entry point::

            loader = PluginLoader(PluginStore(get_plugins_dir()))
            loader.register(click_group)

    Args:
        store: The managed plugin directory.
        config: Plugin allow/deny lists. Everything loads when ``None``.
        serializer: Reads the ``.plugin`` definition files.
    """

    def __init__(
        self,
        store: PluginStore,
        config: Optional[PluginsConfig] = None,
        serializer: Optional[DefinitionSerializer] = None,
    ) -> None:
        self.store = store
        self.config = config or PluginsConfig()
        self.serializer = serializer or DefinitionSerializer()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def load_all(self) -> list[LoadedPlugin]:
        """Load every installed plugin that passes the allow/deny lists.

        Returns:
            Loaded plugins sorted by name. Plugins that fail to load are
            logged as warnings and skipped; an empty or missing directory
            yields an empty list.
        """
        enabled_set = set(self.config.enabled)
        disabled_set = set(self.config.disabled)

        for orphan in self.store.orphaned():
            logger.warning(
                "Ignoring plugin definition %s: no binary at %s",
                orphan.definition,
                orphan.binary,
            )

        loaded: list[LoadedPlugin] = []
        for ref in self.store.installed():
            if enabled_set and ref.name not in enabled_set:
                logger.debug("Plugin '%s' not in enabled list, skipping", ref.name)
                continue
            if ref.name in disabled_set:
                logger.debug("Plugin '%s' is disabled, skipping", ref.name)
                continue

            try:
                loaded.append(self.load_plugin(ref))
            except (PluginLoadError, OSError) as exc:
                logger.warning("Failed to load plugin '%s': %s", ref.name, exc)

        return loaded

    def load_plugin(self, ref: PluginArtifactRef) -> LoadedPlugin:
        """Build the host command for a single installed plugin.

        Raises:
            PluginLoadError: If the definition exists but cannot be read, or
                describes a different plugin.
        """
        definition: Optional[PluginDefinition] = None
        if ref.is_described:
            try:
                definition = self.serializer.read(ref.definition)
            except PluginError as exc:
                raise PluginLoadError(str(exc)) from exc
            if definition.name != ref.name:
                raise PluginLoadError(
                    f"definition {ref.definition} names plugin '{definition.name}'"
                )
        else:
            logger.info("Plugin '%s' has no definition yet", ref.name)

        command = PluginCommand(ref, definition)
        return LoadedPlugin(name=ref.name, ref=ref, definition=definition, command=command)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, group: click.Group) -> list[LoadedPlugin]:
        """Load all plugins and add them as top-level subcommands of *group*.

        Plugins whose name collides with an existing command are skipped.

        Returns:
            The plugins that were registered.
        """
        registered: list[LoadedPlugin] = []
        for plugin in self.load_all():
            if plugin.name in group.commands:
                logger.warning(
                    "Plugin '%s' conflicts with a built-in command, skipping", plugin.name
                )
                continue
            group.add_command(plugin.command, plugin.name)
            registered.append(plugin)
            logger.debug("Registered plugin '%s'", plugin.name)
        return registered
