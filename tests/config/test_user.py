import configparser as cp

import pytest
from packaging.version import Version

from sqlite_tiny.config.user import UserConfig


DEFAULTS_CONFIG = {
    "engine": {
        "library": "",
        "capture_backtrace": True,
    },
    "app": {
        "log_level": 20,
        "ratio": 0.5,
    },
}

CONF_VERSION = Version("1.0.0")


@pytest.fixture
def config(tmp_path):
    config_path = tmp_path / "test-config.ini"

    conf = UserConfig(str(config_path), defaults=DEFAULTS_CONFIG, version=CONF_VERSION)

    yield conf

    conf.cleanup()


def test_config_creation(config):
    for section_name, section in DEFAULTS_CONFIG.items():
        for option, value in section.items():
            assert config.get(section_name, option) == value

    assert config.get_version() == CONF_VERSION


def test_config_persistence(config):
    config.set("engine", "library", "/opt/lib/libsqlite3.so")
    config.set("app", "log_level", 10)

    reloaded = UserConfig(
        config.config_path, defaults=DEFAULTS_CONFIG, version=CONF_VERSION
    )

    assert reloaded.get("engine", "library") == "/opt/lib/libsqlite3.so"
    assert reloaded.get("app", "log_level") == 10


def test_config_type_check(config):
    with pytest.raises(ValueError):
        config.set("app", "log_level", "debug")

    # integers are accepted for floats
    config.set("app", "ratio", 1)
    assert config.get("app", "ratio") == 1.0


def test_config_missing_option(config):
    with pytest.raises(cp.NoOptionError):
        config.get("app", "missing")

    with pytest.raises(cp.NoSectionError):
        config.get("missing", "missing")

    assert config.get("app", "missing", default=3) == 3


def test_config_version_update(tmp_path):
    config_path = str(tmp_path / "versioned.ini")

    UserConfig(config_path, defaults=DEFAULTS_CONFIG, version=Version("1.0.0"))
    conf = UserConfig(config_path, defaults=DEFAULTS_CONFIG, version=Version("2.0.0"))

    assert conf.get_version() == Version("2.0.0")


def test_config_reset_and_cleanup(config):
    config.set("app", "log_level", 40)
    config.reset_to_defaults()

    assert config.get("app", "log_level") == 20

    config.cleanup()
    config.cleanup()


def test_config_without_load(tmp_path):
    config_path = tmp_path / "not-loaded.ini"

    conf = UserConfig(
        str(config_path), defaults=DEFAULTS_CONFIG, version=CONF_VERSION, load=False
    )

    assert not config_path.exists()
    assert conf.get("app", "log_level") == 20
