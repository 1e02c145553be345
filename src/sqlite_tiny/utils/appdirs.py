"""
Platform dependent locations for the config file and the CLI log. macOS, Linux and
Windows are supported, other platforms use the Linux (XDG) layout.
"""

from __future__ import annotations

import os
import platform
from os import path as osp


__all__ = [
    "get_home_dir",
    "get_conf_path",
    "get_cache_path",
    "get_log_path",
]


# Per kind: macOS folder below ~/Library, Windows env var and fallback below the home
# dir, XDG env var and fallback below the home dir.
_LOCATIONS = {
    "config": (
        ("Application Support",),
        ("APPDATA", ("AppData", "Roaming")),
        ("XDG_CONFIG_HOME", (".config",)),
    ),
    "cache": (
        ("Caches",),
        ("LOCALAPPDATA", ("AppData", "Local")),
        ("XDG_CACHE_HOME", (".cache",)),
    ),
}


def get_home_dir() -> str:
    """
    :returns: The user's home directory.
    :raises RuntimeError: if it does not exist.
    """
    home = osp.expanduser("~")

    if not osp.isdir(home):
        raise RuntimeError(f"Home directory {home!r} does not exist, please set HOME")

    return home


def _platform_base(kind: str) -> str:
    darwin, windows, xdg = _LOCATIONS[kind]
    system = platform.system()

    if system == "Darwin":
        return osp.join(get_home_dir(), "Library", *darwin)

    env_var, fallback = windows if system == "Windows" else xdg
    return os.environ.get(env_var) or osp.join(get_home_dir(), *fallback)


def _resolve(
    base: str, subfolder: str | None, filename: str | None, create: bool
) -> str:
    folder = osp.join(base, subfolder) if subfolder else base

    if create:
        os.makedirs(folder, exist_ok=True)

    return osp.join(folder, filename) if filename else folder


def get_conf_path(
    subfolder: str | None = None, filename: str | None = None, create: bool = True
) -> str:
    """
    Returns a path in the config directory. ``$SQLITE_TINY_CONFIG_DIR`` takes
    precedence over the platform default, which is ``~/Library/Application Support``
    on macOS, ``%APPDATA%`` on Windows and ``$XDG_CONFIG_HOME`` elsewhere.

    :param subfolder: Folder inside the config directory.
    :param filename: File name to append.
    :param create: Whether to create the folder if it does not exist.
    """
    base = os.environ.get("SQLITE_TINY_CONFIG_DIR") or _platform_base("config")
    return _resolve(base, subfolder, filename, create)


def get_cache_path(
    subfolder: str | None = None, filename: str | None = None, create: bool = True
) -> str:
    """
    Returns a path in the cache directory: ``~/Library/Caches`` on macOS,
    ``%LOCALAPPDATA%`` on Windows and ``$XDG_CACHE_HOME`` elsewhere.

    :param subfolder: Folder inside the cache directory.
    :param filename: File name to append.
    :param create: Whether to create the folder if it does not exist.
    """
    return _resolve(_platform_base("cache"), subfolder, filename, create)


def get_log_path(
    subfolder: str | None = None, filename: str | None = None, create: bool = True
) -> str:
    """
    Returns a path in the log directory. This is ``~/Library/Logs`` on macOS and the
    cache directory everywhere else.
    """
    if platform.system() == "Darwin":
        base = osp.join(get_home_dir(), "Library", "Logs")
    else:
        base = _platform_base("cache")

    return _resolve(base, subfolder, filename, create)
