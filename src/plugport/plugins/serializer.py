"""JSON persistence for plugin definitions.

Definitions are dumped with Pydantic and written through
:func:`~plugport.config._atomic_write`, so a failed write never leaves a
truncated ``.plugin`` file in the managed directory.

A ``.plugin`` file nests one JSON object per command level. Both the JSON
codec and Pydantic recurse per level, so only trees up to
:data:`MAX_DEFINITION_DEPTH` levels are written; deeper ones are rejected
with a :class:`~plugport.exceptions.SerializationError` before anything
touches the disk.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel

from plugport.config import _atomic_write
from plugport.exceptions import SerializationError
from plugport.models import PluginDefinition

MAX_DEFINITION_DEPTH = 64
"""Deepest command tree (root included) a ``.plugin`` file may hold."""


class DefinitionSerializer:
    """Writes and reads :class:`~plugport.models.PluginDefinition` files."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    def write(self, obj: BaseModel, path: Path) -> None:
        """Serialize *obj* to *path*, replacing any existing file.

        Raises:
            SerializationError: If a definition is nested deeper than
                :data:`MAX_DEFINITION_DEPTH`, or the model cannot be dumped,
                or the file cannot be written.
        """
        if isinstance(obj, PluginDefinition):
            depth = obj.depth()
            if depth > MAX_DEFINITION_DEPTH:
                raise SerializationError(
                    f"Cannot write {path}: the command tree of '{obj.name}' is "
                    f"{depth} levels deep, at most {MAX_DEFINITION_DEPTH} are supported"
                )
        try:
            data = obj.model_dump(mode="json")
            _atomic_write(Path(path), json.dumps(data, indent=self._indent) + "\n")
        except (OSError, TypeError, ValueError, RecursionError) as exc:
            raise SerializationError(f"Cannot write {path}: {exc}") from exc

    def read(self, path: Path) -> PluginDefinition:
        """Load and validate a definition file.

        Raises:
            SerializationError: If the file is unreadable, not UTF-8, not
                JSON, nested too deeply, or does not describe a valid
                definition.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
            return PluginDefinition.model_validate(json.loads(text))
        except (OSError, ValueError, RecursionError) as exc:
            # UnicodeDecodeError, JSONDecodeError and ValidationError are ValueErrors.
            raise SerializationError(f"Invalid plugin definition at {path}: {exc}") from exc
