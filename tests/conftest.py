import logging
import os
import time

from contextlib import ExitStack
from http import HTTPStatus

import pytest

from flask import abort

from cfp.bootstrap import bootstrap
from cfp.environment import Environment
from cfp.exceptions import OAuthError
from cfp.factory import create_app
from cfp.utils.logs import cfp_logger
from tests.helpers.fs import temporary_fs
from tests.patches import function

TESTING_CONFIG = """\
application:
  title: Test CFP
  date_timezone: UTC
  speakers:
    - Ada
    - Grace
mail:
  host: smtp.example.com
  port: 587
  encryption: tls
log:
  level: info
"""

PRODUCTION_CONFIG = """\
application:
  title: CFP
  debug: true
"""

INVALID_TOKEN_HEADERS = {"WWW-Authenticate": 'Bearer realm="cfp", error="invalid_token"'}


@pytest.fixture(autouse=True)
def keep_process_timezone(monkeypatch):
    """bootstrap() exports application.date_timezone as TZ. Undo that after every test."""

    monkeypatch.setenv("TZ", os.environ.get("TZ", "UTC"))
    monkeypatch.setattr(time, "tzset", function(), raising=False)


@pytest.fixture(autouse=True)
def close_log_files():
    """Detach the file handlers that create_app() installs so log files do not outlive a test."""

    yield

    for handler in list(cfp_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            cfp_logger.removeHandler(handler)
            handler.close()


@pytest.fixture
def make_project():
    """Create temporary CFP installations for testing.

    Returns:
        A function that accepts a mapping of config/ file names to their contents, plus any other
        top-level files or folders as keyword arguments, and returns the installation's base path.
    """

    with ExitStack() as stack:

        def _project(config=None, **tree):
            return stack.enter_context(temporary_fs({"config": config or {}, **tree}))

        yield _project


@pytest.fixture
def project(make_project):
    """An installation with a configuration file for the testing and production environments."""

    return make_project({"testing.yml": TESTING_CONFIG, "production.yml": PRODUCTION_CONFIG})


@pytest.fixture
def container(project):
    result = bootstrap(project, Environment.TESTING)

    assert result.ok, result.error

    return result.container


@pytest.fixture
def app(container):
    """Flask application test fixture required by pytest-flask.

    https://pytest-flask.readthedocs.io/en/latest/tutorial.html#step-2-configure.

    Besides the application's own handlers, the fixture registers a handful of endpoints that fail
    in different ways so that the global error handler can be exercised end to end.

    Returns:
        An instance of the Flask application for testing.
    """

    _app = create_app(container)
    register_failing_endpoints(_app)

    return _app


def register_failing_endpoints(app):
    @app.route("/fail/generic")
    def _fail_generic():
        raise RuntimeError("Something broke")

    @app.route("/fail/unauthorized")
    def _fail_unauthorized():
        abort(HTTPStatus.UNAUTHORIZED)

    @app.route("/fail/forbidden")
    def _fail_forbidden():
        abort(HTTPStatus.FORBIDDEN)

    @app.route("/fail/oauth")
    def _fail_oauth():
        raise OAuthError(
            "The access token is invalid",
            error_type="invalid_token",
            http_status_code=HTTPStatus.UNAUTHORIZED,
            http_headers=INVALID_TOKEN_HEADERS,
        )

    @app.route("/fail/post-only", methods=["POST"])
    def _post_only():
        return "ok"
