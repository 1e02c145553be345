"""
This module contains the default configuration values and a function to return the
config instance for a specified config_name.
"""

from __future__ import annotations

import threading
from typing import Any

from packaging.version import Version

from .user import UserConfig, _DefaultsType
from ..utils.appdirs import get_conf_path


CONFIG_DIR_NAME = "sqlite-tiny"
DEFAULT_CONFIG_NAME = "sqlite-tiny"


# =============================================================================
#  Defaults
# =============================================================================

DEFAULTS_CONFIG: _DefaultsType = {
    "engine": {
        "library": "",  # path to the SQLite shared library, empty to search for it
        "capture_backtrace": True,  # capture a stack trace with every SqliteError
    },
    "app": {
        "log_level": 20,  # log level for the CLI log file and stderr, default: INFO
    },
}

# If you change the default value of an option or remove an option, bump the
# version. Adding a new option does not require a change.
CONF_VERSION = Version("1.0")


# =============================================================================
# Factories
# =============================================================================


_config_instances: dict[str, UserConfig] = {}
_config_lock = threading.Lock()


def SqliteTinyConfig(config_name: str = DEFAULT_CONFIG_NAME) -> UserConfig:
    """
    Returns an existing config instance or creates a new one.

    :param config_name: Name of the configuration. A new config file will be created
        if none exists for the given config_name.
    :return: Config instance which saves any changes to the drive.
    """

    with _config_lock:
        try:
            return _config_instances[config_name]
        except KeyError:
            pass

        config_path = get_conf_path(CONFIG_DIR_NAME, f"{config_name}.ini")

        try:
            conf = UserConfig(
                config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION
            )
        except OSError:
            conf = UserConfig(
                config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION, load=False
            )

        _config_instances[config_name] = conf
        return conf


def clear_config_cache() -> None:
    """Forgets all cached config instances, for instance after the config directory
    changed."""
    with _config_lock:
        _config_instances.clear()


def read_option(
    section: str, option: str, config_name: str = DEFAULT_CONFIG_NAME
) -> Any:
    """
    Reads a single option for use by the library itself. Unlike
    :func:`SqliteTinyConfig`, this never creates the config file or its directory.
    An instance which was already created through :func:`SqliteTinyConfig` is used
    as is, so that changes made through it are visible.

    :param section: Config section.
    :param option: Config option.
    :param config_name: Name of the configuration.
    :returns: The option's value, or its default if the file does not set it.
    """
    with _config_lock:
        conf = _config_instances.get(config_name)

    if conf is None:
        config_path = get_conf_path(CONFIG_DIR_NAME, f"{config_name}.ini", create=False)
        conf = UserConfig(
            config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION, load=False
        )
        conf.reload()

    return conf.get(section, option)
