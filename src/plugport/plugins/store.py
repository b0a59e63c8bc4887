"""The managed plugin directory.

Every installed plugin ``P`` owns two files in one directory:

* ``P<ext>`` -- the plugin binary (``.exe`` on Windows, ``.bin`` elsewhere,
  see :func:`~plugport.config.binary_extension`);
* ``P.plugin`` -- its serialized :class:`~plugport.models.PluginDefinition`.

:class:`PluginStore` only resolves paths and enumerates what is on disk.
Writing files is the job of the installer and the serializer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from plugport.config import DEFINITION_EXTENSION, binary_extension
from plugport.exceptions import DirectoryCreationError
from plugport.models import PluginArtifactRef

logger = logging.getLogger(__name__)


class PluginStore:
    """Path resolution for the managed plugin directory.

    Args:
        directory: The managed directory. It need not exist yet.
        extension: Binary suffix. Defaults to the current platform's.
    """

    def __init__(self, directory: Path, extension: Optional[str] = None) -> None:
        self.directory = Path(directory)
        self.extension = extension if extension is not None else binary_extension()

    def ensure_directory(self) -> Path:
        """Create the managed directory (recursive, idempotent).

        Raises:
            DirectoryCreationError: If the filesystem refuses.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreationError(
                f"Cannot create plugin directory {self.directory}: {exc}"
            ) from exc
        logger.debug("Plugin directory ready at %s", self.directory)
        return self.directory

    def binary_path(self, name: str) -> Path:
        return self.directory / f"{name}{self.extension}"

    def definition_path(self, name: str) -> Path:
        return self.directory / f"{name}{DEFINITION_EXTENSION}"

    def ref(self, name: str) -> PluginArtifactRef:
        return PluginArtifactRef(
            name=name,
            binary=self.binary_path(name),
            definition=self.definition_path(name),
        )

    def installed(self) -> list[PluginArtifactRef]:
        """Return a ref for every installed binary, sorted by plugin name.

        A missing directory means no plugins are installed.
        """
        if not self.directory.is_dir():
            return []
        names = sorted(
            p.name[: -len(self.extension)] if self.extension else p.name
            for p in self.directory.iterdir()
            if p.is_file() and self._is_binary_name(p.name)
        )
        return [self.ref(name) for name in names]

    def orphaned(self) -> list[PluginArtifactRef]:
        """Return refs for definition files that have no matching binary."""
        if not self.directory.is_dir():
            return []
        refs = [
            self.ref(p.stem)
            for p in sorted(self.directory.glob(f"*{DEFINITION_EXTENSION}"))
            if p.is_file()
        ]
        return [ref for ref in refs if ref.is_orphaned]

    def _is_binary_name(self, filename: str) -> bool:
        if filename.startswith("."):
            return False
        if self.extension:
            return filename.endswith(self.extension) and len(filename) > len(self.extension)
        return "." not in filename
