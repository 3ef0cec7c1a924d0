"""Bootstrap (composition root) for the CFP application.

``bootstrap`` turns a base path and an environment identity into an immutable ``AppContainer``.
The steps run in a fixed order, because each one depends on the previous:

a. bind the base path and the environment;
b. default debug mode to enabled;
c. resolve every named path (the config file location is one of them);
d. load the environment's configuration file, which must exist;
e. apply ``application.date_timezone`` if it is configured;
f. keep debug mode on unless the environment is production.

Startup failures are returned rather than raised. The process entry point inspects the
``BootstrapResult`` and decides whether to abort.
"""

import os
import time
import zoneinfo

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from cfp.config import EMPTY_TREE, ConfigDriver, ConfigTree, YamlConfigDriver, lookup
from cfp.environment import Environment
from cfp.exceptions import ConfigFormatError, ConfigNotFoundError, ConfigUnreadableError
from cfp.paths import resolve_paths
from cfp.utils.logs import cfp_logger

TIMEZONE_KEY = "application.date_timezone"


@dataclass(frozen=True)
class AppContainer:
    """Everything the rest of the application needs to know about how it was started.

    Built once by `bootstrap` and read-only afterwards, so it may be shared between concurrently
    handled requests without locking.
    """

    base_path: str
    environment: Environment
    debug: bool
    paths: Mapping[str, str]
    tree: ConfigTree
    timezone: Optional[str] = None

    def config(self, dotted_path: str):
        """Retrieve a configuration value by dotted path, or None if it is not configured."""
        return lookup(self.tree, dotted_path)

    def path(self, slug: str) -> str:
        return self.paths[slug]

    def is_production(self) -> bool:
        return self.environment.equals(Environment.PRODUCTION)

    def is_development(self) -> bool:
        return self.environment.equals(Environment.DEVELOPMENT)

    def is_testing(self) -> bool:
        return self.environment.equals(Environment.TESTING)


@dataclass(frozen=True)
class BootstrapResult:
    """Either a container or the error that prevented one from being built."""

    container: Optional[AppContainer] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.container is not None


def load_configuration(path: str, driver: ConfigDriver) -> ConfigTree:
    """Load the configuration file at `path` with `driver`.

    A file the driver does not support is left unbound: the returned tree is empty.

    Raises:
        ConfigNotFoundError: There is no file at `path`.
        ConfigUnreadableError: The file exists but cannot be read.
        ConfigFormatError: The driver could not parse the file.
    """

    if not os.path.isfile(path):
        raise ConfigNotFoundError(path)

    if not driver.supports(path):
        cfp_logger.warning(
            f"{type(driver).__name__} does not support {path}; continuing without configuration"
        )
        return EMPTY_TREE

    return driver.load(path)


def _in_system_database(name: str) -> bool:
    return any(os.path.isfile(os.path.join(root, name)) for root in zoneinfo.TZPATH)


def apply_timezone(name: str) -> str:
    """Make `name` the process's local timezone.

    The name is validated with zoneinfo, which falls back to the tzdata package, but time.tzset()
    only reads the system timezone database. A zone missing from the latter leaves the C library
    on UTC, so that case is logged as a warning.

    Raises:
        ZoneInfoNotFoundError: `name` is not a known IANA timezone.
        ValueError: `name` is not a valid timezone key at all.
        OSError: `name` names a directory of the timezone database rather than a zone.
    """

    zoneinfo.ZoneInfo(name)

    if not _in_system_database(name):
        cfp_logger.warning(
            f"{name} is not in the system timezone database; local time may stay UTC"
        )

    os.environ["TZ"] = name
    # tzset() is only available on Unix.
    if hasattr(time, "tzset"):
        time.tzset()

    return name



def bootstrap(base_path, environment: Environment, driver: Optional[ConfigDriver] = None):
    """Resolve paths and configuration for the application.

    Args:
        base_path: The root of the installation. Relative paths are made absolute.
        environment: The environment the application runs in.
        driver: Optional. The ConfigDriver used to read the configuration file. Defaults to
            YamlConfigDriver.

    Returns:
        A BootstrapResult. On failure no later step has run, and `error` holds the cause.
    """

    base_path = os.path.abspath(os.fspath(base_path))
    debug = True

    paths = MappingProxyType(resolve_paths(base_path, environment))
    config_path = paths["config"]

    try:
        tree = load_configuration(config_path, driver or YamlConfigDriver())
    except (ConfigNotFoundError, ConfigUnreadableError, ConfigFormatError) as e:
        return BootstrapResult(error=e)

    cfp_logger.info(f"configuration loaded from {config_path}")

    timezone = lookup(tree, TIMEZONE_KEY)
    if timezone:
        try:
            apply_timezone(str(timezone))
        except (zoneinfo.ZoneInfoNotFoundError, ValueError, OSError) as e:
            return BootstrapResult(
                error=ConfigFormatError(config_path, f"unknown timezone {timezone!r} ({e})")
            )
        timezone = str(timezone)
    else:
        timezone = None

    if environment.equals(Environment.PRODUCTION):
        debug = False

    container = AppContainer(
        base_path=base_path,
        environment=environment,
        debug=debug,
        paths=paths,
        tree=tree,
        timezone=timezone,
    )

    cfp_logger.info(f"environment = {environment}, debug = {debug}")

    return BootstrapResult(container=container)
