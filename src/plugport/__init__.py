"""plugport -- register standalone executables as subcommands of a host CLI.

A plugin is any executable built with :mod:`plugport.sdk`. Installing it
copies the binary into a managed directory and records a machine-readable
description of its commands; from then on ``plugport <plugin> ...`` forwards
to the plugin in a separate process.

Typical workflow::

    plugport plugin initialize ./dist/greeter   # install and describe
    plugport greeter hello World                # run a plugin command

Modules:
    app: Typer application factory and CLI entry point.
    sdk: Helpers for writing plugins (the ``initialize`` contract).
    plugins: Store, installer, introspection, lifecycle, and loader.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and plugin directory resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
