"""Turn unhandled failures into responses.

A failure raised while handling a request is first classified into a ``FailureEvent``, which
records what kind of failure it is and which status code and headers it asks for. The
``ErrorDispatcher`` then negotiates the representation: clients that accept ``application/json``
receive ``{"error": <message>}``, everybody else an HTML error page.
"""

from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Callable, Iterable, Tuple

from flask import Response, jsonify, make_response
from werkzeug.exceptions import HTTPException

from cfp.exceptions import OAuthError

JSON_MIMETYPE = "application/json"

ERROR_TEMPLATES = {
    HTTPStatus.UNAUTHORIZED: "error/401.html",
    HTTPStatus.FORBIDDEN: "error/403.html",
    HTTPStatus.NOT_FOUND: "error/404.html",
}
FALLBACK_ERROR_TEMPLATE = "error/500.html"


class FailureKind(Enum):
    GENERIC = "generic"  # status supplied by the caller
    HTTP = "http"  # carries its own status and headers
    PROTOCOL_AUTH = "protocol_auth"  # OAuth flow failure, status and headers under other names


@dataclass(frozen=True)
class FailureEvent:
    cause: BaseException
    kind: FailureKind
    status: int
    headers: Tuple[Tuple[str, str], ...] = ()
    message: str = ""


def _http_headers(error: HTTPException) -> Tuple[Tuple[str, str], ...]:
    # get_headers() always describes an HTML body; the response we build sets its own type.
    return tuple(
        (name, value) for name, value in error.get_headers() if name.lower() != "content-type"
    )


def classify(error: BaseException, code: int) -> FailureEvent:
    """Tag a failure with its kind, status, headers and message.

    Args:
        error: The failure raised while handling the request.
        code: The status code to use when the failure does not carry one itself.

    Returns:
        A FailureEvent. OAuth failures are checked last, so they win over any HTTP status the same
        object might also carry.
    """

    event = FailureEvent(cause=error, kind=FailureKind.GENERIC, status=code, message=str(error))

    if isinstance(error, HTTPException) and error.code is not None:
        event = FailureEvent(
            cause=error,
            kind=FailureKind.HTTP,
            status=error.code,
            headers=_http_headers(error),
            message=error.description or str(error),
        )

    if isinstance(error, OAuthError):
        event = FailureEvent(
            cause=error,
            kind=FailureKind.PROTOCOL_AUTH,
            status=error.http_status_code,
            headers=tuple(error.http_headers.items()),
            message=str(error),
        )

    return event


def default_status(error: BaseException) -> int:
    """The status code the request pipeline assigns to a failure before it is dispatched."""

    if isinstance(error, HTTPException) and error.code is not None:
        return error.code
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_template(code: int) -> str:
    return ERROR_TEMPLATES.get(code, FALLBACK_ERROR_TEMPLATE)


class ErrorDispatcher:
    """Render exactly one response for a failure.

    Args:
        render: Called with a template name, returns the rendered body. In the application this is
            flask.render_template.
    """

    def __init__(self, render: Callable[[str], str]):
        self._render = render

    def dispatch(self, error: BaseException, accepted_types: Iterable[str], code: int) -> Response:
        """Build the response for `error`.

        This must be called with application context.

        Args:
            error: The failure raised while handling the request.
            accepted_types: The mimetypes listed in the request's Accept header.
            code: The status code the request pipeline assigned to the failure.

        Returns:
            A JSON response if `application/json` is among `accepted_types`, otherwise the rendered
            error page for `code`.
        """

        if JSON_MIMETYPE in set(accepted_types):
            return self._json_response(classify(error, code))

        return make_response(self._render(error_template(code)), code)

    @staticmethod
    def _json_response(event: FailureEvent) -> Response:
        return make_response(jsonify(error=event.message), event.status, list(event.headers))
