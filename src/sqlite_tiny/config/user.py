"""
This module provides ini-file backed settings with typed values. Strings are stored
as they are, any other value as its ``repr`` which is parsed back with
:func:`ast.literal_eval`. The type of each option is fixed by its default value.
"""

from __future__ import annotations

import ast
import copy
import logging
import os
import configparser as cp
from threading import RLock
from typing import Any, Dict

from packaging.version import Version


logger = logging.getLogger(__name__)

_DefaultsType = Dict[str, Dict[str, Any]]


class NoDefault:
    """Marks an option without default value, since ``None`` is a valid default."""


def _encode(value: Any) -> str:
    return value if isinstance(value, str) else repr(value)


def _decode(raw: str, default: Any) -> Any:
    if isinstance(default, str):
        return raw
    try:
        return ast.literal_eval(raw)
    except (SyntaxError, ValueError):
        return raw


def _type_mismatch(default: Any, value: Any) -> bool:
    return default is not NoDefault and type(default) is not type(value)


class UserConfig(cp.ConfigParser):
    """
    Settings stored in an ini file. Instances may be shared between threads, but not
    between processes writing to the same file.

    :param path: Path of the ini file.
    :param defaults: Default values by section and option. Options which are not in
        the file fall back to these.
    :param load: Whether to read and update the file at ``path``. If ``False``, the
        file is neither read nor written until :meth:`save` is called.
    :param version: Version of the option layout. It is stored in the ``[main]``
        section and updated in the file when it differs.

    .. note:: :meth:`get` and :meth:`set` take different arguments than the
        ConfigParser methods they replace.
    """

    DEFAULT_SECTION_NAME = "main"

    def __init__(
        self,
        path: str,
        defaults: _DefaultsType | None = None,
        load: bool = True,
        version: Version = Version("0.0.0"),
    ) -> None:
        super().__init__(interpolation=None)

        self._path = path
        self._lock = RLock()

        self.default_config: _DefaultsType = copy.deepcopy(defaults or {})
        self.default_config.setdefault(self.DEFAULT_SECTION_NAME, {})
        self.default_config[self.DEFAULT_SECTION_NAME]["version"] = str(version)

        self.reset_to_defaults(save=False)

        if load:
            self.reload()

            stored = self.get_version()
            if stored != version:
                logger.debug("Updating config %s from %s to %s", path, stored, version)
                self.set_version(version, save=False)

            self.save()

    def reload(self) -> None:
        """Reads values from the ini file, if it exists, without writing to it."""
        with self._lock:
            try:
                self.read(self._path, encoding="utf-8")
            except cp.MissingSectionHeaderError:
                logger.error("Ignoring config file without section headers: %s", self._path)

    @property
    def config_path(self) -> str:
        """The ini file where this configuration is stored."""
        return self._path

    def save(self) -> None:
        """Writes all values to the ini file."""
        with self._lock:
            os.makedirs(os.path.dirname(self._path), exist_ok=True)

            with open(self._path, "w", encoding="utf-8") as f:
                self.write(f)

    def get_version(self) -> Version:
        """
        :returns: Version of the option layout, not of the application.
        """
        return Version(self.get(self.DEFAULT_SECTION_NAME, "version"))

    def set_version(self, version: Version, save: bool = True) -> None:
        """
        :param version: New version of the option layout.
        :param save: Whether to write the change to the ini file.
        """
        self.set(self.DEFAULT_SECTION_NAME, "version", str(version), save=save)

    def reset_to_defaults(self, save: bool = True) -> None:
        """
        Sets all options to their default values.

        :param save: Whether to write the change to the ini file.
        """
        with self._lock:
            for section, options in self.default_config.items():
                if not self.has_section(section):
                    self.add_section(section)
                for option, value in options.items():
                    super().set(section, option, _encode(value))

            if save:
                self.save()

    def get_default(self, section: str, option: str) -> Any:
        """
        :param section: Config section.
        :param option: Config option.
        :returns: The default value or :class:`NoDefault`.
        """
        return self.default_config.get(section, {}).get(option, NoDefault)

    def get(self, section: str, option: str, default: Any = NoDefault) -> Any:  # type: ignore
        """
        Returns the value of an option, converted to the type of its default.

        :param section: Config section.
        :param option: Config option.
        :param default: Value to return if the option is not set.
        :returns: The option's value.
        :raises cp.NoSectionError: if the section does not exist.
        :raises cp.NoOptionError: if the option is not set and there is no default.
        """
        with self._lock:
            if self.has_option(section, option):
                raw = super().get(section, option, raw=True)
            elif default is not NoDefault:
                return default
            elif self.has_section(section):
                raise cp.NoOptionError(option, section)
            else:
                raise cp.NoSectionError(section)

        default_value = self.get_default(section, option)
        value = _decode(raw, default_value)

        if _type_mismatch(default_value, value):
            logger.error(
                "Expected %s for [%s][%s] but got %s",
                type(default_value).__name__,
                section,
                option,
                type(value).__name__,
            )

        return value

    def set(self, section: str, option: str, value: Any, save: bool = True) -> None:  # type: ignore
        """
        Sets the value of an option.

        :param section: Config section.
        :param option: Config option.
        :param value: The value. It must have the type of the option's default, but
            integers are accepted for float options.
        :param save: Whether to write the change to the ini file.
        :raises ValueError: if the value has the wrong type.
        """
        default_value = self.get_default(section, option)

        if isinstance(default_value, float) and isinstance(value, int):
            value = float(value)

        if _type_mismatch(default_value, value):
            raise ValueError(
                f"Config value [{section}][{option}] must be of type "
                f"{type(default_value).__name__}, not {type(value).__name__}"
            )

        with self._lock:
            if not self.has_section(section):
                self.add_section(section)
            super().set(section, option, _encode(value))

            if save:
                self.save()

    def cleanup(self) -> None:
        """Deletes the ini file and resets all options to their defaults."""
        with self._lock:
            self.reset_to_defaults(save=False)

            try:
                os.remove(self._path)
            except FileNotFoundError:
                pass
