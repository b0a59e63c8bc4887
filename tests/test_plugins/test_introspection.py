"""Tests for plugport.plugins.introspection."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
import typer
from pydantic import ValidationError

from plugport.exceptions import SerializationError
from plugport.models import CommandNode, PluginDefinition
from plugport.plugins.introspection import ClickCommandSpec, introspect
from plugport.plugins.serializer import DefinitionSerializer


class TestClickCommandSpec:
    def test_children_keep_declaration_order(self, click_tree: click.Group) -> None:
        spec = ClickCommandSpec(click_tree)
        assert [c.name for c in spec.children] == ["zeta", "alpha", "configure"]

    def test_leaf_has_no_children(self, click_tree: click.Group) -> None:
        leaf = ClickCommandSpec(click_tree.commands["configure"])
        assert leaf.children == []

    def test_name_override(self, click_tree: click.Group) -> None:
        assert ClickCommandSpec(click_tree, name="renamed").name == "renamed"
        assert ClickCommandSpec(click_tree).name == "tool"

    def test_description_from_docstring(self, click_tree: click.Group) -> None:
        alpha = ClickCommandSpec(click_tree.commands["alpha"])
        assert alpha.description == "First letter."

    def test_help_option_is_not_reported(self, click_tree: click.Group) -> None:
        names = [n for opt in ClickCommandSpec(click_tree).options for n in opt.names]
        assert "--help" not in names
        assert names == ["--verbose", "-v"]


class TestIntrospect:
    def test_node_count_matches_tree(self, click_tree: click.Group) -> None:
        definition = introspect(ClickCommandSpec(click_tree), "tool")
        assert definition.node_count() == 6

    def test_root_takes_plugin_name(self, click_tree: click.Group) -> None:
        definition = introspect(ClickCommandSpec(click_tree), "installed-name")
        assert definition.name == "installed-name"
        assert definition.root is not None
        assert definition.root.name == "installed-name"
        assert len(definition.commands) == 1

    def test_depth_first_declaration_order(self, click_tree: click.Group) -> None:
        definition = introspect(ClickCommandSpec(click_tree), "tool")
        paths = [path for path, _ in definition.walk()]
        assert paths == [
            (),
            ("zeta",),
            ("alpha",),
            ("alpha", "beta"),
            ("alpha", "gamma"),
            ("configure",),
        ]

    def test_option_arity(self, click_tree: click.Group) -> None:
        definition = introspect(ClickCommandSpec(click_tree), "tool")

        zeta = definition.find(["zeta"])
        assert zeta is not None
        fast, target = zeta.options
        assert fast.names == ["--fast", "--slow"]
        assert fast.arity == "0"
        assert fast.help == "Speed."
        assert target.positional is True
        assert target.arity == "0..*"
        assert target.names == ["TARGET"]

        beta = definition.find(["alpha", "beta"])
        assert beta is not None
        assert beta.options[0].arity == "1"

        gamma = definition.find(["alpha", "gamma"])
        assert gamma is not None
        assert gamma.hidden is True
        assert gamma.options[0].arity == "0..1"
        assert gamma.options[0].required is False

    def test_deterministic(self, click_tree: click.Group) -> None:
        first = introspect(ClickCommandSpec(click_tree), "tool")
        second = introspect(ClickCommandSpec(click_tree), "tool")
        assert first == second

    def test_json_round_trip(self, click_tree: click.Group) -> None:
        definition = introspect(ClickCommandSpec(click_tree), "tool")
        restored = PluginDefinition.model_validate_json(definition.model_dump_json())
        assert restored == definition
        assert [p for p, _ in restored.walk()] == [p for p, _ in definition.walk()]

    @pytest.mark.parametrize("levels", [30, 2000])
    def test_deep_nesting(self, levels: int) -> None:
        root = click.Group(name="deep")
        group = root
        for depth in range(levels):
            child = click.Group(name=f"level{depth}")
            group.add_command(child)
            group = child

        definition = introspect(ClickCommandSpec(root), "deep")
        assert definition.node_count() == levels + 1
        assert definition.depth() == levels + 1
        assert definition.find([f"level{d}" for d in range(levels)]) is not None

    def test_deep_tree_exceeding_persisted_depth_is_reported(self, tmp_path: Path) -> None:
        root = click.Group(name="deep")
        group = root
        for depth in range(400):
            child = click.Group(name=f"level{depth}")
            group.add_command(child)
            group = child

        definition = introspect(ClickCommandSpec(root), "deep")
        with pytest.raises(SerializationError, match="401 levels deep") as excinfo:
            DefinitionSerializer().write(definition, tmp_path / "deep.plugin")
        assert "Circular reference" not in str(excinfo.value)

    def test_single_command_plugin(self) -> None:
        @click.command(name="solo")
        @click.option("--flag", is_flag=True)
        def solo(flag: bool) -> None:
            pass

        definition = introspect(ClickCommandSpec(solo), "solo")
        assert definition.node_count() == 1
        assert definition.root is not None
        assert definition.root.children == []


class TestTyperPlugins:
    def test_sdk_app_tree(self, sample_plugin_app: typer.Typer) -> None:
        command = typer.main.get_command(sample_plugin_app)
        definition = introspect(ClickCommandSpec(command), "greeter")

        root = definition.root
        assert root is not None
        assert root.description == "Greet people."
        assert [c.name for c in root.children] == [
            "initialize",
            "hello",
            "configure",
            "greeting",
        ]

        initialize = root.child("initialize")
        assert initialize is not None
        assert initialize.hidden is True
        path_arg = next(o for o in initialize.options if o.positional)
        assert path_arg.arity == "0..1"
        assert path_arg.names == ["<path to plugin>"]

        hello = root.child("hello")
        assert hello is not None
        assert hello.description == "Greet NAME."
        name_arg, shout = hello.options
        assert name_arg.positional and name_arg.required
        assert name_arg.arity == "1"
        assert "--shout" in shout.names
        assert shout.arity == "0"

        assert definition.find(["greeting", "show"]) is not None


class TestCommandNodeValidation:
    def test_duplicate_sibling_names_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommandNode(
                name="root",
                children=[CommandNode(name="same"), CommandNode(name="same")],
            )

    def test_same_name_at_different_levels_allowed(self) -> None:
        node = CommandNode(
            name="root",
            children=[
                CommandNode(name="a", children=[CommandNode(name="a")]),
            ],
        )
        assert node.child("a") is not None
