"""Plugin commands -- install and inspect plugins from the host CLI.

Provides the ``plugport plugin`` sub-command group:

* ``plugin initialize <path>`` -- run a plugin binary's own hidden
  ``initialize`` command, which installs it into the managed directory.
* ``plugin list`` -- table of installed plugins and their state.
* ``plugin show <name>`` -- print a plugin's persisted definition.
* ``plugin enable <name>`` / ``plugin disable <name>`` -- edit the
  allow/deny lists in the global config.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import typer

from plugport.exit_codes import EXIT_INVALID_USAGE, EXIT_PLUGIN_ERROR
from plugport.output import (
    debug,
    error,
    format_response,
    info,
    print_table,
    success,
    suggest,
    warning,
)


plugin_app = typer.Typer(no_args_is_help=True)


def _store():  # noqa: ANN202
    from plugport.config import get_plugins_dir
    from plugport.plugins.store import PluginStore

    return PluginStore(get_plugins_dir())


@plugin_app.command("initialize")
def plugin_initialize(
    path: str = typer.Argument(help="Path to the plugin binary."),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Overwrite an installed binary without asking."
    ),
) -> None:
    """Install a plugin binary and register its commands.

    Runs ``<path> initialize <absolute path>`` so the plugin copies itself
    into the managed plugin directory, writes its definition, and runs its
    ``configure`` step. The exit code of the plugin is passed through.

    Example::

        plugport plugin initialize ./dist/greeter
    """
    binary = Path(path).expanduser().absolute()
    if not binary.is_file():
        error(f"Plugin binary not found: {binary}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    argv = [str(binary), "initialize", str(binary)]
    if yes:
        argv.append("--yes")
    debug(f"Running {' '.join(argv)}")
    try:
        completed = subprocess.run(argv)
    except OSError as exc:
        error(f"Cannot run plugin {binary}: {exc}")
        raise typer.Exit(code=EXIT_PLUGIN_ERROR) from None

    if completed.returncode != 0:
        raise typer.Exit(code=completed.returncode)
    success(f"Plugin installed from {binary}")


@plugin_app.command("list")
def plugin_list() -> None:
    """List installed plugins.

    Shows every binary in the managed plugin directory together with
    whether a definition has been generated for it.
    """
    from plugport.exceptions import PluginError
    from plugport.plugins.serializer import DefinitionSerializer

    store = _store()
    info(f"Plugin directory: {store.directory}")
    serializer = DefinitionSerializer()

    rows: list[list[str]] = []
    for ref in store.installed():
        if not ref.is_described:
            rows.append([ref.name, "not initialized", ""])
            continue
        try:
            definition = serializer.read(ref.definition)
        except PluginError:
            rows.append([ref.name, "invalid definition", ""])
            continue
        summary = definition.description.splitlines()[0] if definition.description else ""
        rows.append([ref.name, "ready", summary])

    if not rows:
        info("No plugins installed.")
        suggest("Run: plugport plugin initialize <path to plugin>")
        return

    print_table(["Name", "Status", "Description"], rows, title=f"Plugins ({len(rows)})")


@plugin_app.command("show")
def plugin_show(
    name: str = typer.Argument(help="Plugin name."),
) -> None:
    """Show the persisted definition of an installed plugin."""
    from plugport.exceptions import PluginError
    from plugport.plugins.serializer import DefinitionSerializer

    ref = _store().ref(name)
    if not ref.is_installed:
        error(f"Plugin '{name}' is not installed.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if not ref.is_described:
        error(f"Plugin '{name}' has no definition yet.")
        suggest(f"Run: plugport {name} initialize")
        raise typer.Exit(code=EXIT_PLUGIN_ERROR)
    try:
        definition = DefinitionSerializer().read(ref.definition)
    except PluginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_response(definition.model_dump(mode="json"))


@plugin_app.command("enable")
def plugin_enable(
    name: str = typer.Argument(help="Plugin name."),
) -> None:
    """Remove a plugin from the disabled list."""
    from plugport.config import load_global_config, save_global_config

    if not _store().ref(name).is_installed:
        warning(f"Plugin '{name}' is not installed; the setting applies once it is.")

    config = load_global_config()
    if name in config.plugins.disabled:
        config.plugins.disabled.remove(name)
    if config.plugins.enabled and name not in config.plugins.enabled:
        config.plugins.enabled.append(name)
    save_global_config(config)
    success(f"Plugin '{name}' enabled.")


@plugin_app.command("disable")
def plugin_disable(
    name: str = typer.Argument(help="Plugin name."),
) -> None:
    """Stop registering a plugin with the host CLI."""
    from plugport.config import load_global_config, save_global_config

    config = load_global_config()
    if name not in config.plugins.disabled:
        config.plugins.disabled.append(name)
    if name in config.plugins.enabled:
        config.plugins.enabled.remove(name)
    save_global_config(config)
    success(f"Plugin '{name}' disabled.")
