"""Shared test fixtures for plugport.

Provides reusable fixtures for isolated config and plugin directories,
output state, fake console collaborators, a sample plugin application, and
CLI runners. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
import pytest
import typer

from plugport.output import reset_output
from plugport.plugins.store import PluginStore
from plugport.sdk import create_plugin_app


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When a CliRunner redirects those streams during a test
    and the test finishes, the cached references become stale.  Resetting
    forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears PLUGPORT_* variables,
    disables colour so diagnostics are plain prints, and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("plugport.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("PLUGPORT_PLUGIN_DIR", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def plugin_dir(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Managed plugin directory under tmp_path (not created yet)."""
    path = isolated_config / "managed-plugins"
    monkeypatch.setenv("PLUGPORT_PLUGIN_DIR", str(path))
    return path


@pytest.fixture
def store(plugin_dir: Path) -> PluginStore:
    """A store using the ``.bin`` suffix regardless of the host platform."""
    return PluginStore(plugin_dir, extension=".bin")


@pytest.fixture
def plugin_binary(isolated_config: Path) -> Path:
    """A fake plugin binary outside the managed directory."""
    dist = isolated_config / "dist"
    dist.mkdir()
    binary = dist / "greeter"
    binary.write_bytes(b"#!/bin/sh\necho greeter v1\n")
    return binary


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeConsole:
    """Records status lines and answers prompts from a queue.

    An exhausted queue answers with the prompt's default.
    """

    def __init__(self, answers: Optional[list[str]] = None) -> None:
        self.lines: list[str] = []
        self.prompts: list[tuple[str, str]] = []
        self.answers = list(answers or [])

    def out(self, line: str) -> None:
        self.lines.append(line)

    def prompt(self, message: str, default: str) -> str:
        self.prompts.append((message, default))
        return self.answers.pop(0) if self.answers else default


class FakeDispatcher:
    """Records executed command lines."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []

    def execute(self, *args: str) -> int:
        self.calls.append(args)
        return 0


@pytest.fixture
def console() -> FakeConsole:
    return FakeConsole()


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


# ---------------------------------------------------------------------------
# Command trees
# ---------------------------------------------------------------------------


@pytest.fixture
def click_tree() -> click.Group:
    """A hand-built click tree with 6 nodes, declared out of alphabetical order.

    ::

        tool
        +-- zeta   (--fast, TARGET)
        +-- alpha
        |   +-- beta
        |   +-- gamma (hidden)
        +-- configure
    """

    @click.group(name="tool", help="A tool.")
    @click.option("--verbose", "-v", is_flag=True, help="Be loud.")
    def tool(verbose: bool) -> None:
        pass

    @tool.command(name="zeta", help="Last letter first.")
    @click.option("--fast/--slow", default=False, help="Speed.")
    @click.argument("target", nargs=-1)
    def zeta(fast: bool, target: tuple[str, ...]) -> None:
        pass

    @tool.group(name="alpha")
    def alpha() -> None:
        """First letter."""

    @alpha.command(name="beta")
    @click.option("--count", type=int, default=1, help="How many.")
    def beta(count: int) -> None:
        pass

    @alpha.command(name="gamma", hidden=True)
    @click.argument("value", required=False)
    def gamma(value: Optional[str]) -> None:
        pass

    @tool.command(name="configure")
    def configure() -> None:
        pass

    return tool


@pytest.fixture
def configure_calls() -> list[bool]:
    """Collects one entry per ``configure`` run of :func:`sample_plugin_app`.

    Each entry records whether the definition file existed at that moment.
    """
    return []


@pytest.fixture
def sample_plugin_app(configure_calls: list[bool]) -> typer.Typer:
    """A plugin built with the SDK: ``hello``, ``configure``, ``greeting show``."""
    from plugport.config import get_plugins_dir

    app = create_plugin_app("greeter", help="Greet people.")
    greeting_app = typer.Typer(no_args_is_help=True, help="Manage greetings.")
    app.add_typer(greeting_app, name="greeting")

    @app.command("hello")
    def hello(
        name: str = typer.Argument(help="Who to greet."),
        shout: bool = typer.Option(False, "--shout", help="Upper case."),
    ) -> None:
        """Greet NAME."""
        typer.echo(f"Hello {name}")

    @app.command("configure")
    def configure() -> None:
        """Configure the greeter."""
        configure_calls.append((get_plugins_dir() / "greeter.plugin").is_file())

    @greeting_app.command("show")
    def greeting_show() -> None:
        """Show the greeting."""
        typer.echo("Hello")

    return app


@pytest.fixture
def plain_plugin_app() -> typer.Typer:
    """A plugin without a ``configure`` subcommand."""
    app = create_plugin_app("plain", help="No configuration.")

    @app.command("run")
    def run() -> None:
        """Run it."""

    return app


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
