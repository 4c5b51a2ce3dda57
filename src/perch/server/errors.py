"""Error handling pipeline for perch requests.

Maps HTTPError exceptions raised by capability callbacks, and unexpected
failures, to Response objects. Routing outcomes never reach here: the
dispatcher answers those itself.
"""

import logging

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a plain-text Response."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    resp = Response(body=exc.detail or f"Error {exc.status}").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors.

    In debug mode the body names the exception; otherwise it is the
    bare status line so internals never leak to clients.
    """
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = f"500 Internal Server Error\n\n{type(exc).__name__}: {exc}"
        return Response(body=body, status=500)
    return Response(body="500 Internal Server Error", status=500)
