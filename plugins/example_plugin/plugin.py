#!/usr/bin/env python3
"""Example plugin that greets people and remembers a default greeting.

Build it into a standalone binary (for instance with PyInstaller) or make
this file executable, then install it with::

    plugport plugin initialize ./plugins/example_plugin/plugin.py
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from plugport.config import get_config_dir
from plugport.output import info, success
from plugport.sdk import create_plugin_app, run_plugin

app = create_plugin_app("greeter", help="Greet people from the command line.")

greeting_app = typer.Typer(no_args_is_help=True, help="Manage saved greetings.")
app.add_typer(greeting_app, name="greeting")


def _settings_path():  # noqa: ANN202
    return get_config_dir() / "greeter.json"


def _load_greeting() -> str:
    path = _settings_path()
    if path.is_file():
        return json.loads(path.read_text(encoding="utf-8")).get("greeting", "Hello")
    return "Hello"


@app.command("hello")
def hello(
    name: str = typer.Argument(help="Who to greet."),
    shout: bool = typer.Option(False, "--shout", help="Print in upper case."),
) -> None:
    """Greet NAME."""
    message = f"{_load_greeting()} {name}"
    typer.echo(message.upper() if shout else message)


@greeting_app.command("show")
def greeting_show() -> None:
    """Show the saved greeting."""
    typer.echo(_load_greeting())


@app.command("configure")
def configure(
    greeting: Optional[str] = typer.Option(None, "--greeting", help="Default greeting."),
) -> None:
    """Ask for the default greeting and save it."""
    if greeting is None:
        greeting = typer.prompt("Default greeting", default=_load_greeting())
    _settings_path().write_text(json.dumps({"greeting": greeting}) + "\n", encoding="utf-8")
    success(f"Saved greeting '{greeting}'")
    info("Try: plugport greeter hello World")


if __name__ == "__main__":
    run_plugin(app)
