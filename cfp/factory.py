import os

from http import HTTPStatus

from flask import Flask, render_template, request
from jinja2 import ChoiceLoader, FileSystemLoader, PackageLoader

from cfp.bootstrap import AppContainer
from cfp.error_dispatch import ErrorDispatcher, default_status
from cfp.sentry import init_and_ensure_sentry_connection
from cfp.utils.logs import cfp_logger, configure_file_logging, parse_level

# Flask configuration variable -> configuration key.
MAIL_SETTINGS = {
    "MAIL_SERVER": "mail.host",
    "MAIL_PORT": "mail.port",
    "MAIL_USERNAME": "mail.username",
    "MAIL_PASSWORD": "mail.password",
    "MAIL_ENCRYPTION": "mail.encryption",
    "MAIL_AUTH_MODE": "mail.auth_mode",
}


def create_app(container: AppContainer) -> Flask:
    """A Flask application factory.

    See https://flask.palletsprojects.com/en/2.0.x/patterns/appfactories/.

    Args:
        container: The result of a successful cfp.bootstrap.bootstrap() call.

    Returns:
        A Flask application instance.
    """

    app = Flask(
        __name__.split(".", maxsplit=1)[0],
        template_folder=container.path("templates"),
        static_folder=container.path("public"),
    )

    # Templates in the installation's templates/ directory take precedence over the error pages
    # that ship with the package.
    app.jinja_loader = ChoiceLoader(
        [FileSystemLoader(container.path("templates")), PackageLoader("cfp", "templates")]
    )

    app.debug = container.debug
    app.config.update(
        ENVIRONMENT=container.environment.value,
        TESTING=container.is_testing(),
        UPLOAD_FOLDER=container.path("upload"),
        TIMEZONE=container.timezone,
    )
    app.config.update({name: container.config(key) for name, key in MAIL_SETTINGS.items()})
    app.extensions["cfp"] = container

    configure_logging(container)
    cfp_logger.info("environment = {}".format(app.config["ENVIRONMENT"]))

    # Only set up a connection to a Sentry event ingestion endpoint in production.
    if container.is_production() and (sentry_dsn := container.config("sentry.dsn")):
        init_and_ensure_sentry_connection(container.environment.value, sentry_dsn)

    register_handlers(app)
    register_commands(app)

    return app


def configure_logging(container: AppContainer):
    """Write application logs to log.path (default: log/app.log under the base path)."""

    log_path = container.config("log.path") or os.path.join(container.base_path, "log", "app.log")
    log_level = parse_level(container.config("log.level") or "debug")

    return configure_file_logging(str(log_path), log_level)


def register_handlers(app: Flask):
    """
    Register all Flask app handlers. This SHOULD NOT include endpoint definitions. These handlers
    are functions that need to be decorated by a Flask app (such as app.errorhandler(exc)).
    """

    dispatcher = ErrorDispatcher(render_template)

    @app.errorhandler(Exception)
    def _handle_error(e):
        code = default_status(e)

        if code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            cfp_logger.error(
                f"Unhandled failure while serving {request.method} {request.path}",
                exc_info=e,
                extra={"label": type(e).__name__},
            )

        accepted_types = [mimetype for mimetype, _quality in request.accept_mimetypes]
        return dispatcher.dispatch(e, accepted_types, code)


def register_commands(app: Flask):
    """
    Registers all blueprints (cli commands) for the Flask app

    Args:
        - app: Flask object
    """

    from cfp.cli import cfp_bp

    app.register_blueprint(cfp_bp)
