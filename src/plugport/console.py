"""Interactive console used by the plugin lifecycle.

:class:`Console` is the narrow interface the installer and the
``initialize`` command depend on: one method to emit a status line and one
to read a line with a default. :class:`TerminalConsole` implements it on
top of :mod:`plugport.output` and :func:`typer.prompt`; tests pass their
own fakes.
"""

from __future__ import annotations

from typing import Protocol

import typer

from plugport.output import info


class Console(Protocol):
    """Line-oriented console collaborator."""

    def out(self, line: str) -> None: ...

    def prompt(self, message: str, default: str) -> str: ...


class TerminalConsole:
    """Console backed by stderr status lines and a blocking stdin prompt.

    An empty reply returns *default*.
    """

    def out(self, line: str) -> None:
        info(line)

    def prompt(self, message: str, default: str) -> str:
        return typer.prompt(message, default=default, show_default=False)


class AssumeYesConsole(TerminalConsole):
    """Non-interactive console that answers every prompt with ``"y"``."""

    def prompt(self, message: str, default: str) -> str:
        info(f"{message} y")
        return "y"
