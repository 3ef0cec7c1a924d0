import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

from cfp import __version__
from cfp.exceptions import SentryInitializationError


def init_and_ensure_sentry_connection(env: str, sentry_dsn: str):
    """
    Initialize sentry with the Flask integration as well as the default integrations. Also makes
    sure initialization succeeds. We do this by logging a test message at the least serious level
    (debug). According to the docs, the return is None iff something went wrong. Otherwise, the
    return is the ID of the message.

    Args:
        env: A valid value from cfp.constants.env_names.
        sentry_dsn: Read from the sentry.dsn configuration key. Points to external sentry resource.

    Raises:
        SentryInitializationError: The client could not deliver the test message.
    """
    sentry_sdk.init(  # pylint: disable=abstract-class-instantiated
        dsn=sentry_dsn,
        integrations=[FlaskIntegration()],
        environment=env,
        release=f"cfp@{__version__}",
    )
    # Docs:
    # https://getsentry.github.io/sentry-python/api.html?highlight=capture_message#sentry_sdk.capture_message
    resp = sentry_sdk.capture_message("CFP SENTRY INITIALIZATION TEST MESSAGE", level="debug")
    if resp is None:
        raise SentryInitializationError(env)
