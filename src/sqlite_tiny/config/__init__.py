from __future__ import annotations

import os

from .main import SqliteTinyConfig, DEFAULT_CONFIG_NAME, CONFIG_DIR_NAME, read_option
from ..utils.appdirs import get_conf_path


__all__ = [
    "SqliteTinyConfig",
    "read_option",
    "DEFAULT_CONFIG_NAME",
    "list_configs",
    "remove_configuration",
]


def list_configs() -> list[str]:
    """
    Lists all sqlite-tiny configs.

    :returns: A list of all currently existing config names.
    """
    configs = []
    for file in os.listdir(get_conf_path(CONFIG_DIR_NAME)):
        if file.endswith(".ini"):
            configs.append(os.path.splitext(os.path.basename(file))[0])

    return configs


def remove_configuration(config_name: str) -> None:
    """
    Removes the config file associated with the given configuration.

    :param config_name: The configuration to remove.
    """
    SqliteTinyConfig(config_name).cleanup()
