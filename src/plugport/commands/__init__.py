"""Built-in CLI sub-commands for plugport.

* :mod:`~plugport.commands.plugin` -- install, list, and inspect plugins.

Installed plugins themselves are attached next to these built-ins at
startup by :class:`~plugport.plugins.loader.PluginLoader`.
"""
