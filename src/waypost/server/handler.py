"""ASGI handler — translates ASGI scope/messages to waypost types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, runs them through the router, and sends the
negotiated Response back through ASGI send().
"""

import anyio

from waypost._internal.asgi import Receive, Scope, Send
from waypost.config import AppConfig
from waypost.errors import HTTPError
from waypost.http.request import Request
from waypost.routing.router import Router
from waypost.server.errors import (
    http_error_response,
    internal_error_response,
    timeout_response,
)
from waypost.server.negotiation import negotiate
from waypost.server.sender import send_response


def apply_method_override(request: Request) -> Request:
    """Let a POST stand in for PUT/PATCH/DELETE via X-HTTP-Method-Override."""
    if request.method != "POST":
        return request
    override = request.headers.get("x-http-method-override", "").strip().upper()
    if override in {"PUT", "PATCH", "DELETE"}:
        return request.with_method(override)
    return request


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    if config.method_override:
        request = apply_method_override(request)

    try:
        # Cancellation reaches handlers and middleware through the
        # ambient cancel scope; the router itself has no timeout.
        if config.request_timeout is None:
            result = await router.run(request)
        else:
            with anyio.fail_after(config.request_timeout):
                result = await router.run(request)
        response = negotiate(result)
    except TimeoutError:
        response = timeout_response(request, config.request_timeout or 0.0)
    except HTTPError as exc:
        response = http_error_response(exc, request, debug=config.debug)
    except Exception as exc:
        response = internal_error_response(exc, request, debug=config.debug)

    await send_response(response, send, head=request.method == "HEAD")


