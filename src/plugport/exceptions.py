"""Exception hierarchy for plugport.

All exceptions inherit from :class:`PlugportError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`plugport.exit_codes`.
The top-level handlers in :func:`plugport.app.main` and
:func:`plugport.sdk.run_plugin` catch ``PlugportError`` and exit with the
appropriate code, while unexpected exceptions produce a crash log.

Subclass hierarchy::

    PlugportError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ConfigError                (exit 1)
    +-- PluginError                (exit 10)
        +-- ArtifactMissingError
        +-- DirectoryCreationError
        +-- SerializationError
        +-- PluginLoadError        (never fatal, logged by the loader)
"""

from plugport.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
)


class PlugportError(Exception):
    """Base exception for all plugport errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`plugport.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PlugportError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(PlugportError):
    """Raised for configuration problems (invalid JSON, bad plugin directory)."""

    exit_code = EXIT_GENERIC_FAILURE


class PluginError(PlugportError):
    """Raised when a plugin fails to install, initialise, or load."""

    exit_code = EXIT_PLUGIN_ERROR


class ArtifactMissingError(PluginError):
    """Raised when the plugin binary is absent after an install attempt."""


class DirectoryCreationError(PluginError):
    """Raised when the managed plugin directory cannot be created."""


class SerializationError(PluginError):
    """Raised when a plugin definition cannot be written or read back."""


class PluginLoadError(PluginError):
    """Raised for a single plugin that cannot be loaded at startup.

    :class:`~plugport.plugins.loader.PluginLoader` catches this per plugin
    and logs a warning, so it never aborts host startup.
    """
