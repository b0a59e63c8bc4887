"""Where plugport keeps its files, and the global ``config.json``.

Directories follow the XDG base directory layout on Linux and BSD
(``$XDG_CONFIG_HOME/plugport``, ``$XDG_DATA_HOME/plugport``) and live under
``~/.plugport`` on macOS and Windows.

The managed plugin directory is resolved by :func:`get_plugins_dir`, in
this order:

1. the ``PLUGPORT_PLUGIN_DIR`` environment variable,
2. ``plugins.directory`` in ``config.json``,
3. ``<data dir>/plugins``.

Files written here go through :func:`_atomic_write` (temp file in the same
directory, then ``os.replace``), so readers never see a partial file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from plugport.exceptions import ConfigError
from plugport.models import GlobalConfig

_APP_NAME = "plugport"
_CONFIG_FILENAME = "config.json"
_PLUGIN_DIR_ENV = "PLUGPORT_PLUGIN_DIR"

# kind -> (XDG variable, default under $HOME, location under ~/.plugport)
_XDG_DIRS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("data",)),
}

_BINARY_EXTENSIONS = {"Windows": ".exe"}
_DEFAULT_BINARY_EXTENSION = ".bin"

DEFINITION_EXTENSION = ".plugin"
"""Suffix of the serialized :class:`~plugport.models.PluginDefinition` files."""


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _XDG_DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var, "")
        path = (Path(base) if base else Path.home().joinpath(*xdg_default)) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json`` (created on demand)."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for the default plugin directory and crash logs (created on demand)."""
    return _app_dir("data")


def get_plugins_dir(config: Optional[GlobalConfig] = None) -> Path:
    """Return the managed plugin directory without creating it.

    Installing a plugin creates the directory; the loader treats a missing
    one as "no plugins installed".

    Args:
        config: Already loaded global config. Read from disk when ``None``
            and the environment variable is not set.

    Raises:
        ConfigError: If ``config.json`` has to be read and is invalid.
    """
    env_value = os.environ.get(_PLUGIN_DIR_ENV, "")
    if env_value:
        return Path(env_value).expanduser().absolute()
    if config is None:
        config = load_global_config()
    if config.plugins.directory:
        return Path(config.plugins.directory).expanduser().absolute()
    return get_data_dir() / "plugins"


def binary_extension() -> str:
    """Suffix of installed plugin binaries: ``.exe`` on Windows, ``.bin`` elsewhere."""
    return _BINARY_EXTENSIONS.get(platform.system(), _DEFAULT_BINARY_EXTENSION)


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The temp file is created next to *path* so the rename stays on one
    filesystem. It is removed again on any failure, including
    ``KeyboardInterrupt``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``; a missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors.
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")
