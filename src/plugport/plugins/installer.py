"""Plugin installer -- place a plugin binary in the managed directory.

The installer only handles bytes on disk. Deciding *which* plugin is being
installed, describing it, and configuring it are the lifecycle's job (see
:mod:`plugport.plugins.lifecycle`).
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Callable, Optional, Union

from plugport.exceptions import ArtifactMissingError, PluginError
from plugport.models import InstalledArtifact
from plugport.plugins.store import PluginStore

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str, str], str]
"""``confirm(prompt, default) -> answer`` callback used on conflicts."""

OVERWRITE_PROMPT = "The plugin is already installed, overwrite [Yn]?"


class PluginInstaller:
    """Copies plugin binaries into a :class:`PluginStore`.

    Args:
        store: The managed plugin directory.
    """

    def __init__(self, store: PluginStore) -> None:
        self.store = store

    def install(
        self,
        source: Optional[Union[str, Path]],
        plugin_name: str,
        confirm: ConfirmFn,
    ) -> InstalledArtifact:
        """Install the binary at *source* as plugin *plugin_name*.

        * A missing or relative *source* skips the copy; the plugin is
          assumed to be installed already.
        * An existing, different destination is only overwritten when
          *confirm* answers blank or ``y`` (case-insensitive). Any other
          answer keeps the installed binary.
        * Otherwise the binary is copied unconditionally.

        Args:
            source: Path to the plugin binary, or ``None``.
            plugin_name: Name to install the plugin under.
            confirm: Prompt callback used when a binary is already installed.

        Returns:
            The installed artifact and whether it was copied in this call.

        Raises:
            DirectoryCreationError: If the managed directory cannot be created.
            ArtifactMissingError: If an absolute *source* does not exist
                when it has to be copied, or if no binary exists at the
                destination after the copy step.
            PluginError: If copying fails.
        """
        self.store.ensure_directory()
        ref = self.store.ref(plugin_name)
        destination = ref.binary
        copied = False

        source_path = Path(source) if source is not None else None
        if source_path is not None and source_path.is_absolute():
            if destination.exists() and not _same_file(source_path, destination):
                answer = confirm(OVERWRITE_PROMPT, "Y")
                if not answer.strip() or answer.strip().lower() == "y":
                    self._copy(source_path, destination)
                    copied = True
                    logger.info("Plugin binary overwritten for '%s'", plugin_name)
                else:
                    logger.info("Kept installed binary for '%s'", plugin_name)
            elif not destination.exists():
                self._copy(source_path, destination)
                copied = True
                logger.info("Copied plugin binary for '%s'", plugin_name)
        else:
            logger.debug("No absolute plugin path given, skipping install of '%s'", plugin_name)

        if not destination.is_file():
            raise ArtifactMissingError(f"{destination} does not exist")

        return InstalledArtifact(ref=ref, copied=copied)

    def _copy(self, source: Path, destination: Path) -> None:
        try:
            shutil.copy2(source, destination)
            mode = destination.stat().st_mode
            destination.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except FileNotFoundError as exc:
            raise ArtifactMissingError(f"{source} does not exist") from exc
        except OSError as exc:
            raise PluginError(f"Cannot copy {source} to {destination}: {exc}") from exc


def _same_file(source: Path, destination: Path) -> bool:
    try:
        return os.path.samefile(source, destination)
    except OSError:
        return source == destination
