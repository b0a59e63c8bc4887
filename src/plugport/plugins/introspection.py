"""Command-tree introspection -- turn a live command into a PluginDefinition.

:func:`introspect` walks any tree that satisfies the :class:`Introspectable`
protocol and maps it onto plain :class:`~plugport.models.CommandNode`
values. It performs no I/O and always yields the same tree for the same
input.

:class:`ClickCommandSpec` adapts a :class:`click.Command` to the protocol.
Typer applications are supported through :func:`typer.main.get_command`::

    root = ClickCommandSpec(typer.main.get_command(plugin_app))
    definition = introspect(root, "greeter")
"""

from __future__ import annotations

import inspect
from typing import Protocol, Sequence

import click

from plugport.models import CommandNode, OptionInfo, PluginDefinition


class Introspectable(Protocol):
    """The read-only view of a command needed to describe it."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def hidden(self) -> bool: ...

    @property
    def options(self) -> Sequence[OptionInfo]: ...

    @property
    def children(self) -> Sequence["Introspectable"]: ...


class ClickCommandSpec:
    """:class:`Introspectable` view of a :class:`click.Command`.

    Subcommands are reported in registration order (``Group.commands`` is an
    insertion-ordered dict), not in the alphabetical order ``--help`` uses.
    The implicit ``--help`` option is not one of ``command.params`` and is
    therefore never reported.

    Args:
        command: The click command or group to describe.
        name: Override for the command's name (click groups built by Typer
            may be unnamed at the top level).
    """

    def __init__(self, command: click.Command, name: str | None = None) -> None:
        self._command = command
        self._name = name

    @property
    def name(self) -> str:
        return self._name or self._command.name or ""

    @property
    def description(self) -> str:
        text = self._command.help or self._command.short_help or ""
        return inspect.cleandoc(text) if text else ""

    @property
    def hidden(self) -> bool:
        return bool(self._command.hidden)

    @property
    def options(self) -> list[OptionInfo]:
        return [_describe_param(param) for param in self._command.params]

    @property
    def children(self) -> list[ClickCommandSpec]:
        if not isinstance(self._command, click.Group):
            return []
        return [
            ClickCommandSpec(command, name=name)
            for name, command in self._command.commands.items()
        ]


def introspect(root: Introspectable, plugin_name: str) -> PluginDefinition:
    """Describe the command tree under *root* as a serializable definition.

    The root node is named *plugin_name* regardless of the name the command
    framework gave it, because the definition is keyed by the installed
    binary's name. The walk is depth-first, keeps declaration order and
    uses an explicit stack, so nesting depth is not bounded by the
    interpreter's recursion limit.

    Args:
        root: The plugin's top-level command.
        plugin_name: The plugin's installed name.

    Returns:
        A :class:`~plugport.models.PluginDefinition` whose ``commands`` list
        holds the root node.
    """
    return PluginDefinition(name=plugin_name, commands=[_build_tree(root, plugin_name)])


def _build_tree(root: Introspectable, root_name: str) -> CommandNode:
    # Pre-order pass: every entry's parent has a smaller index.
    entries: list[tuple[Introspectable, str, int]] = []
    stack: list[tuple[Introspectable, str, int]] = [(root, root_name, -1)]
    while stack:
        command, name, parent = stack.pop()
        index = len(entries)
        entries.append((command, name, parent))
        for child in reversed(list(command.children)):
            stack.append((child, child.name, index))

    # Build bottom-up; siblings are collected last-to-first.
    children: list[list[CommandNode]] = [[] for _ in entries]
    for index in range(len(entries) - 1, 0, -1):
        command, name, parent = entries[index]
        children[parent].append(_make_node(command, name, children[index][::-1]))
    return _make_node(root, root_name, children[0][::-1])


def _make_node(command: Introspectable, name: str, children: list[CommandNode]) -> CommandNode:
    return CommandNode(
        name=name,
        description=command.description,
        hidden=command.hidden,
        options=list(command.options),
        children=children,
    )


def _describe_param(param: click.Parameter) -> OptionInfo:
    positional = isinstance(param, click.Argument)
    names = [param.human_readable_name] if positional else [*param.opts, *param.secondary_opts]
    return OptionInfo(
        names=names,
        arity=_arity(param),
        # click.Argument has no help attribute; Typer's TyperArgument does.
        help=getattr(param, "help", None) or "",
        required=bool(param.required),
        positional=positional,
    )


def _arity(param: click.Parameter) -> str:
    if isinstance(param, click.Option) and (param.is_flag or param.count):
        return "0"
    if param.nargs == -1:
        return "1..*" if param.required else "0..*"
    if isinstance(param, click.Argument) and not param.required:
        return f"0..{param.nargs}"
    return str(param.nargs)
