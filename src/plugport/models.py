"""Canonical Pydantic models shared across all plugport modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`PluginsConfig` and :class:`GlobalConfig`.

**Plugin models** -- produced by introspection, persisted as ``<name>.plugin``
files in the managed plugin directory, and consumed by the loader:
    :class:`OptionInfo`, :class:`CommandNode`, :class:`PluginDefinition`,
    :class:`PluginArtifactRef`, and :class:`InstalledArtifact`.

All models use Pydantic v2.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, Field, field_validator


# --- Configuration ---


class PluginsConfig(BaseModel):
    """Plugin settings stored in :class:`GlobalConfig`.

    ``enabled`` and ``disabled`` act as an explicit allowlist/blocklist for
    the loader. When ``enabled`` is non-empty only those plugins are
    registered; otherwise every installed plugin not in ``disabled`` is.
    """

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)
    directory: Optional[str] = Field(
        default=None, description="Override for the managed plugin directory"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/plugport/config.json``.

    Loaded and saved by :func:`~plugport.config.load_global_config` and
    :func:`~plugport.config.save_global_config`.
    """

    plugins: PluginsConfig = Field(default_factory=PluginsConfig)


# --- Plugin definitions ---


class OptionInfo(BaseModel):
    """Metadata for one option or positional parameter of a command.

    ``arity`` uses the ``min..max`` notation common to CLI frameworks:
    ``"0"`` for flags, ``"1"`` for a single value, ``"0..1"`` for an optional
    positional, ``"0..*"``/``"1..*"`` for variadic parameters.
    """

    names: list[str]
    arity: str = "1"
    help: str = ""
    required: bool = False
    positional: bool = False


class CommandNode(BaseModel):
    """One command or subcommand of a plugin's command tree.

    ``children`` keeps declaration order. Sibling names must be unique.
    """

    name: str
    description: str = ""
    hidden: bool = False
    options: list[OptionInfo] = Field(default_factory=list)
    children: list[CommandNode] = Field(default_factory=list)

    @field_validator("children")
    @classmethod
    def _unique_child_names(cls, children: list[CommandNode]) -> list[CommandNode]:
        seen: set[str] = set()
        for child in children:
            if child.name in seen:
                raise ValueError(f"duplicate subcommand name '{child.name}'")
            seen.add(child.name)
        return children

    def child(self, name: str) -> Optional[CommandNode]:
        """Return the direct child called *name*, or ``None``."""
        for node in self.children:
            if node.name == name:
                return node
        return None


class PluginDefinition(BaseModel):
    """The persisted description of one plugin's command surface.

    Written as ``<name>.plugin`` next to the plugin binary. ``commands``
    holds the plugin's top-level command as its single entry; every
    subcommand is nested below it through :attr:`CommandNode.children`.

    Example::

        {
          "name": "greeter",
          "commands": [
            {"name": "greeter", "children": [{"name": "hello", ...}], ...}
          ]
        }
    """

    name: str
    commands: list[CommandNode] = Field(default_factory=list)

    @property
    def root(self) -> Optional[CommandNode]:
        """The plugin's top-level command, if the definition has one."""
        return self.commands[0] if self.commands else None

    @property
    def description(self) -> str:
        root = self.root
        return root.description if root is not None else ""

    def walk(self) -> Iterator[tuple[tuple[str, ...], CommandNode]]:
        """Yield ``(path, node)`` pairs depth-first in declaration order.

        The path excludes the plugin's own name, so the root yields ``()``.
        """
        stack: list[tuple[tuple[str, ...], CommandNode]] = [
            ((), node) for node in reversed(self.commands)
        ]
        while stack:
            path, node = stack.pop()
            yield path, node
            for child in reversed(node.children):
                stack.append(((*path, child.name), child))

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def depth(self) -> int:
        """Number of command levels, counting the root as one (0 when empty)."""
        return max((len(path) + 1 for path, _ in self.walk()), default=0)

    def find(self, path: list[str] | tuple[str, ...]) -> Optional[CommandNode]:
        """Resolve a subcommand path (e.g. ``["config", "set"]``) below the root."""
        node = self.root
        for name in path:
            if node is None:
                return None
            node = node.child(name)
        return node


# --- On-disk artifacts ---


class PluginArtifactRef(BaseModel):
    """The binary and definition paths of one plugin in the managed directory."""

    name: str
    binary: Path
    definition: Path

    @property
    def is_installed(self) -> bool:
        return self.binary.is_file()

    @property
    def is_described(self) -> bool:
        return self.definition.is_file()

    @property
    def is_orphaned(self) -> bool:
        """A definition without a binary is invalid and never loaded."""
        return self.is_described and not self.is_installed


class InstalledArtifact(BaseModel):
    """Result of :meth:`~plugport.plugins.installer.PluginInstaller.install`."""

    ref: PluginArtifactRef
    copied: bool = False
