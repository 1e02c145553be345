"""
Log formats and handlers. The library only emits records through module level loggers
below ``sqlite_tiny``, handlers are installed by applications such as the CLI.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Sequence

from .config import SqliteTinyConfig, DEFAULT_CONFIG_NAME
from .utils.appdirs import get_log_path


__all__ = [
    "scoped_logger",
    "scoped_logger_name",
    "LOG_FMT_LONG",
    "LOG_FMT_SHORT",
    "setup_logging",
]

LOG_FMT_LONG = logging.Formatter(
    fmt="%(asctime)s %(module)s %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
LOG_FMT_SHORT = logging.Formatter(fmt="%(message)s")

_LOG_FILE_MAX_BYTES = 10_000_000


def scoped_logger_name(module_name: str, config_name: str = DEFAULT_CONFIG_NAME) -> str:
    """
    :param module_name: Dotted module name.
    :param config_name: Name of the config whose log output is wanted.
    :returns: ``module_name``, prefixed with the config name for non-default configs.
    """
    if config_name != DEFAULT_CONFIG_NAME:
        module_name = f"{config_name}-{module_name}"
    return module_name


def scoped_logger(
    module_name: str, config_name: str = DEFAULT_CONFIG_NAME
) -> logging.Logger:
    return logging.getLogger(scoped_logger_name(module_name, config_name))


def setup_logging(
    config_name: str = DEFAULT_CONFIG_NAME,
    file: bool = True,
    stderr: bool = True,
    level: int | None = None,
) -> Sequence[logging.Handler]:
    """
    Attaches handlers to the ``sqlite_tiny`` logger. The package logger itself is set
    to ``INFO`` or lower so that the file keeps a useful history, each handler filters
    by ``level``.

    :param config_name: Config which provides the log level and names the log file.
    :param file: Whether to write to a rotating file in the platform's log directory.
    :param stderr: Whether to write to stderr.
    :param level: Handler level. Defaults to the ``app.log_level`` config value.
    :returns: The new handlers, for the caller to remove again.
    """
    if level is None:
        level = SqliteTinyConfig(config_name).get("app", "log_level")

    package_logger = scoped_logger("sqlite_tiny", config_name)
    package_logger.setLevel(min(level, logging.INFO))

    handlers: list[logging.Handler] = []

    if file:
        path = get_log_path("sqlite-tiny", f"{config_name}.log")
        handlers.append(
            RotatingFileHandler(path, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=1)
        )

    if stderr:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(LOG_FMT_LONG)
        handler.setLevel(level)
        package_logger.addHandler(handler)

    return handlers
