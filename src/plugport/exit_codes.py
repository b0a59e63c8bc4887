"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~plugport.exceptions.PlugportError` subclass.
Shell wrappers can inspect the exit code to tell a broken plugin install
apart from a usage mistake without parsing stderr.

Example::

    $ my-plugin initialize /tmp/missing
    $ echo $?
    10   # EXIT_PLUGIN_ERROR -- the plugin binary could not be placed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to install, initialise, or load."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
