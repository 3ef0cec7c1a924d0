"""A collection of exceptions that may be raised while bootstrapping or serving the application."""

from typing import Mapping, Optional

_ARGUMENT_ERROR = "{}() takes exactly {} positional argument{} ({} given)"


class _CFPError(Exception):
    """Base class for the application's parameterised exceptions.

    A subclass lists its constructor arguments in ``params`` and describes itself with ``message``,
    a format string over those names. For example, given

        class ConfigFormatError(_CFPError):
            params = ("path", "reason")
            message = "The config file '{path}' is malformed: {reason}"

    ``ConfigFormatError("cfp.yml", "bad indent")`` has ``path`` and ``reason`` attributes and the
    formatted message as its text. Passing the wrong number of arguments is a TypeError. Never
    raise _CFPError itself.
    """

    def __init__(self, *args):
        argc_actual = len(args)
        argc_expected = len(self.params)

        if argc_actual != argc_expected:
            exc_name = type(self).__name__
            plural = "s" if argc_expected > 1 else ""

            raise TypeError(_ARGUMENT_ERROR.format(exc_name, argc_expected, plural, argc_actual))

        kwargs = dict(zip(self.params, args))

        for name, value in kwargs.items():
            setattr(self, name, value)

        super().__init__(self.message.format(**kwargs))

    @property
    def message(self):
        raise NotImplementedError

    @property
    def params(self):
        raise NotImplementedError


class InvalidArgumentError(_CFPError):
    """Startup-fatal: the application was given an argument it cannot start with."""

    params = ("reason",)
    message = "{reason}"


class ConfigNotFoundError(InvalidArgumentError, FileNotFoundError):
    """Raised when the environment's configuration file does not exist."""

    params = ("path",)
    message = "The config file '{path}' does not exist."


class ConfigFormatError(_CFPError):
    """Raised when a configuration file exists but cannot be understood."""

    params = ("path", "reason")
    message = "The config file '{path}' is malformed: {reason}"


class ConfigUnreadableError(_CFPError):
    """Raised when a configuration file exists but cannot be opened, e.g. for lack of permission."""

    params = ("path", "reason")
    message = "The config file '{path}' could not be read: {reason}"


class SentryInitializationError(_CFPError):
    params = ("environment",)
    message = "Failed to initialize Sentry in the {environment} environment"


class OAuthError(Exception):
    """A failure raised by the OAuth flow.

    Unlike HTTP exceptions, these carry their response status and headers as ``http_status_code``
    and ``http_headers``.

    Args:
        message: A human readable description of the failure.
        error_type: The OAuth 2.0 error code (e.g. "invalid_client").
        http_status_code: The status code with which the failure should be reported.
        http_headers: Headers that must accompany the response (e.g. WWW-Authenticate).
    """

    def __init__(
        self,
        message: str,
        *,
        error_type: str = "invalid_request",
        http_status_code: int = 400,
        http_headers: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(message)

        self.error_type = error_type
        self.http_status_code = http_status_code
        self.http_headers = dict(http_headers or {})
