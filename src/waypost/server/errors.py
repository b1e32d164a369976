"""Error responses for the ASGI host.

Handler and middleware exceptions are not the router's concern; they
propagate out of ``Router.run()`` and are mapped here to plain responses.
"""

import logging
import traceback

from waypost.errors import HTTPError
from waypost.http.request import Request
from waypost.http.response import Response

logger = logging.getLogger("waypost.server")


def http_error_response(exc: HTTPError, request: Request, *, debug: bool) -> Response:
    """Map an HTTPError raised by a handler to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, content_type="text/plain; charset=utf-8")
    response = response.with_status(exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def internal_error_response(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500, content_type="text/plain; charset=utf-8")

    return Response(body="Internal Server Error", status=500)


def timeout_response(request: Request, timeout: float) -> Response:
    logger.warning("Request timed out after %.1fs: %s %s", timeout, request.method, request.path)
    return Response(body="Gateway Timeout", status=504)
