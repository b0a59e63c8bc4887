"""The ``plugport`` host CLI.

Built-in commands live under ``plugport plugin``. Every installed plugin is
added next to them as ``plugport <plugin> ...`` by :func:`build_cli`, which
runs the plugin loader exactly once before the command line is dispatched.

:func:`main` is the console-script entry point. A
:class:`~plugport.exceptions.PlugportError` that escapes a command is
printed as a single ``Error:`` line and exits with the error's code; any
other exception is written to a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import click
import typer

from plugport import __version__
from plugport.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="plugport",
    help="Run installed plugins as first-class subcommands.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

from plugport.commands.plugin import plugin_app  # noqa: E402

app.add_typer(plugin_app, name="plugin", help="Install and inspect plugins.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"plugport {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the process-wide OutputManager before any command runs.

    Also runs before plugin passthrough commands. Options placed after the
    plugin name are not seen here; they are forwarded to the plugin.
    """
    from plugport.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    if verbose:
        logging.getLogger("plugport").setLevel(logging.DEBUG)


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Save the current traceback as ``<data dir>/logs/crash-<timestamp>.log``."""
    from plugport.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _load_plugins(cli: click.Group) -> None:
    """Register installed plugins on *cli*.

    A broken config or plugin directory is logged; the built-in ``plugin``
    commands must stay usable to repair it.
    """
    from plugport.config import get_plugins_dir, load_global_config
    from plugport.exceptions import PlugportError
    from plugport.plugins.loader import PluginLoader
    from plugport.plugins.store import PluginStore

    try:
        config = load_global_config()
        loader = PluginLoader(PluginStore(get_plugins_dir(config)), config.plugins)
        registered = loader.register(cli)
    except (PlugportError, OSError) as exc:
        logger.warning("Plugins not loaded: %s", exc)
        return
    logger.debug("Registered %d plugin(s)", len(registered))


def build_cli(load_plugins: bool = True) -> click.Group:
    """Compile the Typer app to a click group and attach installed plugins.

    Args:
        load_plugins: Set to ``False`` to get the built-in commands only.
    """
    cli = typer.main.get_command(app)
    if not isinstance(cli, click.Group):
        raise TypeError(f"plugport app compiled to {type(cli).__name__}, expected a click.Group")
    if load_plugins:
        _load_plugins(cli)
    return cli


def main(argv: Optional[list[str]] = None) -> None:
    """Console-script entry point.

    Raises:
        SystemExit: Always; click exits on its own, errors exit explicitly.
    """
    _setup_signal_handlers()
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", level=logging.WARNING)
    try:
        build_cli()(args=argv, prog_name="plugport")
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from plugport.exceptions import PlugportError
        from plugport.output import error

        if isinstance(exc, PlugportError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
