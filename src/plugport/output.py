"""Terminal output for the host CLI and for plugins built with the SDK.

Data (plugin tables, definition JSON) goes to stdout so it can be piped.
Everything else (status lines such as ``Initializing plugin 'greeter'``,
prompts, warnings, errors) goes to stderr.

A single :class:`OutputManager` is installed per process by the root
callback of ``plugport`` or of a plugin. The module-level helpers
(:func:`info`, :func:`error`, ...) forward to it, so library code such as
:class:`~plugport.console.TerminalConsole` never has to carry it around.

Colour is off when ``NO_COLOR`` is set (any value), when ``TERM=dumb``, or
with ``--no-color``; diagnostics are then written with plain ``print``.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Rendering of stdout data. ``AUTO`` resolves to ``RICH`` when
            stdout is a terminal and colour is enabled, ``PLAIN`` otherwise.
        no_color: Disable colour and Rich styling.
        quiet: Drop info, success, and suggestion lines. Warnings and
            errors are always shown.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            use_rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        # Paths in status lines must stay copy-pasteable, so no hard wrapping.
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
            soft_wrap=True,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Render a JSON-compatible value, e.g. ``definition.model_dump(mode="json")``.

        Plain mode writes one ``key<TAB>value`` line per top-level key (nested
        values as compact JSON) or one line per list item.
        """
        if self._format == OutputFormat.PLAIN:
            if isinstance(data, dict):
                for key, value in data.items():
                    if isinstance(value, (dict, list)):
                        value = json.dumps(value, ensure_ascii=False, default=str)
                    self.print_data(f"{key}\t{value}")
            elif isinstance(data, list):
                for item in data:
                    self.print_data(str(item))
            else:
                self.print_data(str(data))
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.JSON:
            self.print_data(text)
        else:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a Rich table, a JSON array of objects, or TSV.

        *title* is only shown by the Rich renderer.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, style="green")

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(f"→ {message}", style="dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", style="dim")

    def warning(self, message: str) -> None:
        self._diagnostic(message, label="Warning:", label_style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error:", label_style="bold red")

    def _diagnostic(
        self,
        message: str,
        style: Optional[str] = None,
        label: Optional[str] = None,
        label_style: Optional[str] = None,
    ) -> None:
        if self._no_color:
            line = f"{label} {message}" if label else message
            print(line, file=sys.stderr, flush=True)
        elif label:
            self._stderr.print(f"[{label_style}]{label}[/{label_style}] {escape(message)}")
        else:
            self._stderr.print(message, style=style, markup=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (https://no-color.org) or a dumb terminal."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests swap stdout/stderr between runs)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
