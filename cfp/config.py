"""Environment-scoped application configuration.

Configuration is read from one YAML document per environment (``config/<env>.yml`` under the
installation's base path) into a read-only tree. Values are looked up with dotted paths, so that
``lookup(tree, "mail.host")`` reads the ``host`` key of the ``mail`` section.

Every key is optional: looking up a path that is not in the tree is not an error, it simply
evaluates to None.
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from toolz import get_in

from cfp.exceptions import ConfigFormatError, ConfigNotFoundError, ConfigUnreadableError

ConfigTree = Mapping[str, Any]

EMPTY_TREE: ConfigTree = MappingProxyType({})


def _string_key(key) -> str:
    # YAML 1.1 reads keys like `on:` and `yes:` as booleans.
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def freeze(value):
    """Return a read-only copy of a parsed YAML value.

    Mappings become read-only mappings and lists become tuples, recursively. Scalars are returned
    as is. Mapping keys are turned into strings so that every key can be named in a dotted path:
    ``8080`` becomes ``"8080"`` and the boolean keys YAML makes of ``on``/``yes``/``true`` become
    ``"true"`` (``off``/``no``/``false`` become ``"false"``).

    Raises:
        ValueError: Two keys of the same mapping turn into the same string, e.g. ``1`` and ``"1"``.
    """

    if isinstance(value, Mapping):
        frozen = {}
        for k, v in value.items():
            key = _string_key(k)
            if key in frozen:
                raise ValueError(f"duplicate key {key!r} after converting {k!r} to a string")
            frozen[key] = freeze(v)
        return MappingProxyType(frozen)
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value):
    """The inverse of freeze: plain dicts and lists, e.g. for dumping back to YAML."""

    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def _segment_key(node, segment: str):
    # Sequences are indexed by position, e.g. "application.speakers.0".
    if isinstance(node, tuple) and segment.isascii() and segment.isdigit():
        return int(segment)
    return segment


def lookup(tree: ConfigTree, dotted_path: str):
    """Retrieve a configuration value.

    Args:
        tree: A configuration tree produced by a ConfigDriver.
        dotted_path: The configuration key in dot-notation, e.g. "application.date_timezone". A
            segment that is a non-negative integer selects an element of a sequence.

    Returns:
        The stored value (which may itself be a subtree), or None as soon as a segment of the path
        is missing.
    """

    node = tree
    for segment in dotted_path.split("."):
        node = get_in([_segment_key(node, segment)], node)
        if node is None:
            return None

    return node


class ConfigDriver(ABC):
    """Strategy for turning a configuration file into a ConfigTree."""

    @abstractmethod
    def supports(self, path: str) -> bool:
        """Whether this driver understands the file at `path`. Must not touch the filesystem."""

    @abstractmethod
    def load(self, path: str) -> ConfigTree:
        """Read the file at `path`.

        Raises:
            ConfigNotFoundError: There is no file at `path`.
            ConfigFormatError: The file cannot be parsed into a tree.
        """


class YamlConfigDriver(ConfigDriver):
    extensions = (".yml", ".yaml")

    def supports(self, path: str) -> bool:
        return str(path).lower().endswith(self.extensions)

    def load(self, path: str) -> ConfigTree:
        # Read bytes so that PyYAML detects the encoding and reports undecodable input as a
        # YAMLError rather than a UnicodeDecodeError.
        try:
            with open(path, "rb") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigNotFoundError(path) from e
        except OSError as e:
            raise ConfigUnreadableError(path, e.strerror or str(e)) from e
        except yaml.YAMLError as e:
            raise ConfigFormatError(path, str(e)) from e

        # An empty document parses to None.
        if data is None:
            return EMPTY_TREE

        if not isinstance(data, dict):
            raise ConfigFormatError(
                path, f"expected a mapping at the top level, got {type(data).__name__}"
            )

        try:
            return freeze(data)
        except ValueError as e:
            raise ConfigFormatError(path, str(e)) from e
