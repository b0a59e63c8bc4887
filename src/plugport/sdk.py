"""Plugin SDK -- what a plugin executable needs to plug into the host CLI.

Every plugin is a standalone Typer application that exposes a hidden
``initialize`` subcommand at its top level and, optionally, a ``configure``
subcommand. :func:`create_plugin_app` builds such an application;
:func:`run_plugin` is the plugin's entry point.

Minimal plugin::

    from plugport.sdk import create_plugin_app, run_plugin

    app = create_plugin_app("greeter", help="Say hello.")

    @app.command("hello")
    def hello(name: str) -> None:
        print(f"Hello {name}")

    @app.command("configure")
    def configure() -> None:
        ...

    if __name__ == "__main__":
        run_plugin(app)

The user then installs it with ``greeter initialize /abs/path/to/greeter``
(or ``plugport plugin initialize ./greeter``), after which ``plugport greeter
hello World`` works from the host.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer

from plugport.config import get_plugins_dir
from plugport.console import AssumeYesConsole, TerminalConsole
from plugport.exceptions import PlugportError
from plugport.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from plugport.output import OutputFormat, OutputManager, error, set_output
from plugport.plugins.introspection import ClickCommandSpec
from plugport.plugins.lifecycle import CommandDispatcher, PluginLifecycle
from plugport.plugins.store import PluginStore

logger = logging.getLogger(__name__)


def create_plugin_app(name: str, help: Optional[str] = None) -> typer.Typer:
    """Create a Typer application that satisfies the plugin contract.

    The application gets a root callback (so it always dispatches to
    subcommands rather than collapsing to a single command) and the hidden
    ``initialize`` command.

    Args:
        name: The plugin name. Must match the installed binary's name.
        help: Help text for the plugin's top-level command.

    Returns:
        The Typer application to add plugin commands to.
    """
    app = typer.Typer(
        name=name,
        help=help,
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback()
    def _plugin_callback(
        no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    ) -> None:
        set_output(
            OutputManager(
                format=OutputFormat.AUTO, no_color=no_color, quiet=quiet, verbose=verbose
            )
        )
        if verbose:
            logging.getLogger("plugport").setLevel(logging.DEBUG)

    app.command("initialize", hidden=True)(initialize_command)
    return app


def initialize_command(
    ctx: typer.Context,
    plugin_path: Optional[str] = typer.Argument(
        None,
        metavar="<path to plugin>",
        help="Absolute path of the plugin binary to install.",
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Overwrite an installed binary without asking."
    ),
) -> None:
    """Install this plugin and register its commands with the host CLI.

    Copies the binary at ``<path to plugin>`` into the managed plugin
    directory (asking before replacing an installed copy), writes the
    plugin definition, and runs ``configure`` when the plugin has one.
    """
    parent = ctx.parent if ctx.parent is not None else ctx
    plugin_name = parent.command.name or parent.info_name or ""

    try:
        lifecycle = PluginLifecycle(
            store=PluginStore(get_plugins_dir()),
            console=AssumeYesConsole() if yes else TerminalConsole(),
        )
        lifecycle.initialize(
            root=ClickCommandSpec(parent.command, name=plugin_name),
            plugin_name=plugin_name,
            plugin_path=plugin_path,
            dispatcher=CommandDispatcher(parent.command, prog_name=plugin_name),
        )
    except PlugportError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def run_plugin(app: typer.Typer) -> None:
    """Entry point for a plugin executable.

    Unhandled :class:`~plugport.exceptions.PlugportError` instances cause a
    clean exit with the error's ``exit_code``; anything else exits with
    :data:`~plugport.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    prog_name = app.info.name if isinstance(app.info.name, str) else None
    try:
        app(prog_name=prog_name)
    except SystemExit:
        raise
    except PlugportError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        logger.debug("Unhandled plugin error", exc_info=True)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
