"""Tests for the bootstrap sequence."""

import dataclasses
import os
import zoneinfo

import pytest

from cfp.bootstrap import bootstrap
from cfp.config import ConfigDriver, freeze
from cfp.environment import Environment
from cfp.exceptions import ConfigFormatError, ConfigNotFoundError, ConfigUnreadableError
from tests.patches import function


class _RecordingDriver(ConfigDriver):
    """A driver that hands out a fixed tree and remembers which files it was asked to load."""

    def __init__(self, tree, supported=True):
        self.tree = freeze(tree)
        self.supported = supported
        self.loaded = []

    def supports(self, path):
        return self.supported

    def load(self, path):
        self.loaded.append(path)
        return self.tree


def test_container(project, container):
    assert container.environment is Environment.TESTING
    assert container.base_path == os.path.abspath(project)
    assert container.path("config") == os.path.join(container.base_path, "config", "testing.yml")
    assert container.paths["cache.purifier"] == os.path.join(
        container.base_path, "cache", "htmlpurifier"
    )
    assert container.config("application.title") == "Test CFP"
    assert container.config("application.missing") is None


def test_container_is_immutable(container):
    with pytest.raises(dataclasses.FrozenInstanceError):
        container.debug = False

    with pytest.raises(TypeError):
        container.paths["config"] = "/etc/cfp.yml"


@pytest.mark.parametrize(
    "environment,checks",
    [
        (Environment.PRODUCTION, (True, False, False)),
        (Environment.DEVELOPMENT, (False, True, False)),
        (Environment.TESTING, (False, False, True)),
    ],
)
def test_environment_checks(make_project, environment, checks):
    base = make_project({f"{environment}.yml": "{}"})

    container = bootstrap(base, environment).container

    actual = (container.is_production(), container.is_development(), container.is_testing())

    assert actual == checks


@pytest.mark.parametrize(
    "environment,debug",
    [
        (Environment.PRODUCTION, False),
        (Environment.DEVELOPMENT, True),
        (Environment.TESTING, True),
    ],
)
def test_debug_follows_environment(make_project, environment, debug):
    base = make_project({f"{environment}.yml": "application:\n  title: CFP\n"})

    assert bootstrap(base, environment).container.debug is debug


def test_configuration_cannot_enable_debug_in_production(project):
    result = bootstrap(project, Environment.PRODUCTION)

    assert result.container.config("application.debug") is True
    assert result.container.debug is False


def test_missing_config_halts_bootstrap(make_project):
    base = make_project({"production.yml": "{}"})
    driver = _RecordingDriver({})

    result = bootstrap(base, Environment.DEVELOPMENT, driver=driver)

    assert not result.ok
    assert result.container is None
    assert isinstance(result.error, ConfigNotFoundError)
    assert result.error.path == os.path.join(os.path.abspath(base), "config", "development.yml")
    assert driver.loaded == []


def test_malformed_config_halts_bootstrap(make_project):
    base = make_project({"testing.yml": "- not\n- a mapping\n"})

    result = bootstrap(base, Environment.TESTING)

    assert not result.ok
    assert isinstance(result.error, ConfigFormatError)


def test_undecodable_config_halts_bootstrap(make_project):
    base = make_project({"testing.yml": b"application:\n  title: \xff\xfe\n"})

    result = bootstrap(base, Environment.TESTING)

    assert not result.ok
    assert isinstance(result.error, ConfigFormatError)


def test_unreadable_config_halts_bootstrap(project, monkeypatch):
    monkeypatch.setattr(
        "cfp.config.open", function(raises=PermissionError(13, "Permission denied")), raising=False
    )

    result = bootstrap(project, Environment.TESTING)

    assert not result.ok
    assert isinstance(result.error, ConfigUnreadableError)
    assert "Permission denied" in str(result.error)


def test_substituted_driver(project):
    driver = _RecordingDriver({"application": {"title": "From the fake driver"}})

    container = bootstrap(project, Environment.TESTING, driver=driver).container

    assert driver.loaded == [container.path("config")]
    assert container.config("application.title") == "From the fake driver"


def test_unsupported_config_is_left_absent(project):
    driver = _RecordingDriver({"application": {"title": "never read"}}, supported=False)

    result = bootstrap(project, Environment.TESTING, driver=driver)

    assert result.ok
    assert driver.loaded == []
    assert result.container.config("application.title") is None


def test_timezone_is_applied(make_project):
    base = make_project({"testing.yml": "application:\n  date_timezone: Europe/Amsterdam\n"})

    container = bootstrap(base, Environment.TESTING).container

    assert container.timezone == "Europe/Amsterdam"
    assert os.environ["TZ"] == "Europe/Amsterdam"


def test_timezone_is_optional(make_project, monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    base = make_project({"testing.yml": "application:\n  title: CFP\n"})

    container = bootstrap(base, Environment.TESTING).container

    assert container.timezone is None
    assert os.environ["TZ"] == "UTC"


def test_unknown_timezone_halts_bootstrap(make_project):
    base = make_project({"testing.yml": "application:\n  date_timezone: Mars/Olympus_Mons\n"})

    result = bootstrap(base, Environment.TESTING)

    assert not result.ok
    assert isinstance(result.error, ConfigFormatError)
    assert "Mars/Olympus_Mons" in str(result.error)


def test_relative_base_path_is_made_absolute(project, monkeypatch):
    monkeypatch.chdir(project)

    container = bootstrap(".", Environment.TESTING).container

    assert os.path.isabs(container.base_path)
    assert os.path.realpath(container.base_path) == os.path.realpath(project)


def test_timezone_missing_from_system_database_is_logged(make_project, monkeypatch, caplog):
    monkeypatch.setattr(zoneinfo, "TZPATH", ())
    base = make_project({"testing.yml": "application:\n  date_timezone: Europe/Amsterdam\n"})

    container = bootstrap(base, Environment.TESTING).container

    assert container.timezone == "Europe/Amsterdam"
    assert any(
        record.levelname == "WARNING" and "system timezone database" in record.getMessage()
        for record in caplog.records
    )
