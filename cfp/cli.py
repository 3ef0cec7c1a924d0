"""Custom Flask CLI extensions

This module contains a blueprint that creates Flask CLI (sub)commands when it is registered to a
Flask application. See https://flask.palletsprojects.com/en/2.0.x/cli/#custom-commands.

Once registered, the commands can be called as subcommands of ``flask cfp``::

   $ flask cfp config mail.host
   smtp.example.com
   $ flask cfp paths
   paths.assets = /srv/cfp/web/assets
   ...
   $ flask cfp env
   environment = development, debug = True

"""

from typing import Mapping

import click
import yaml

from flask import Blueprint, current_app

from cfp.config import thaw
from cfp.paths import namespaced

# This blueprint creates the flask cfp subcommand when registered to a Flask application.
cfp_bp = Blueprint("cfp", __name__, cli_group="cfp")


def _container():
    return current_app.extensions["cfp"]


@cfp_bp.cli.command("config")
@click.argument("dotted_path")
def show_config(dotted_path: str) -> None:
    """
    Print the configuration value stored under DOTTED_PATH. Subtrees are printed as YAML.
    Exits with a non-zero status if nothing is configured there.
    """
    value = _container().config(dotted_path)

    if value is None:
        raise click.ClickException(f"{dotted_path} is not configured")

    if isinstance(value, (Mapping, tuple)):
        click.echo(yaml.safe_dump(thaw(value), default_flow_style=False).rstrip())
    else:
        click.echo(value)


@cfp_bp.cli.command("paths")
def show_paths() -> None:
    """Print every named filesystem path."""
    for key, path in sorted(namespaced(_container().paths).items()):
        click.echo(f"{key} = {path}")


@cfp_bp.cli.command("env")
def show_env() -> None:
    container = _container()
    click.echo(f"environment = {container.environment}, debug = {container.debug}")
