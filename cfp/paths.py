"""Filesystem layout of a CFP installation.

Every location the application needs is derived from a single base path through the static table
below. Consumers ask for a path by slug (or by its namespaced ``paths.<slug>`` key) and never build
paths themselves, so the layout can change here without touching them.
"""

import os

from types import MappingProxyType
from typing import Callable, Dict, Mapping

from cfp.environment import Environment

PATH_NAMESPACE = "paths"

PATH_RULES: Mapping[str, Callable[[str, Environment], str]] = MappingProxyType(
    {
        "config": lambda base, env: os.path.join(base, "config", f"{env.value}.yml"),
        "upload": lambda base, _env: os.path.join(base, "web", "uploads"),
        "templates": lambda base, _env: os.path.join(base, "templates"),
        "public": lambda base, _env: os.path.join(base, "web"),
        "assets": lambda base, _env: os.path.join(base, "web", "assets"),
        "cache.twig": lambda base, _env: os.path.join(base, "cache", "twig"),
        "cache.purifier": lambda base, _env: os.path.join(base, "cache", "htmlpurifier"),
    }
)


def resolve_path(base_path: str, environment: Environment, slug: str) -> str:
    """Apply the derivation rule for a single slug.

    Raises:
        KeyError: `slug` is not in PATH_RULES.
    """

    return PATH_RULES[slug](base_path, environment)


def resolve_paths(base_path: str, environment: Environment) -> Dict[str, str]:
    return {slug: rule(base_path, environment) for slug, rule in PATH_RULES.items()}


def namespaced(paths: Mapping[str, str]) -> Dict[str, str]:
    """Key each path as ``paths.<slug>``, e.g. ``paths.cache.twig``."""

    return {f"{PATH_NAMESPACE}.{slug}": path for slug, path in paths.items()}
