"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task/thread.
- ``params_var``: Path parameters of the route that matched it.

Both are set by the dispatcher around the middleware chain and reset
afterwards. Outside a request, ``get_request()`` raises ``LookupError``
and ``parameters()`` is empty.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed, and nothing leaks between requests.
"""

from contextvars import ContextVar

from waypost.http.request import Request

request_var: ContextVar[Request] = ContextVar("waypost_request")
"""The current request. Set by the host or by ``Router.run()``."""

params_var: ContextVar[dict[str, str] | None] = ContextVar("waypost_params", default=None)
"""Path parameters of the matched route."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def parameters() -> dict[str, str]:
    """All path parameters of the current match, in capture order.

    Usage::

        router.get("/posts/{post_id:num}", show)

        def show():
            parameters()  # {"post_id": "5"}
    """
    return dict(params_var.get() or {})


def parameter(name: str, default: str | None = None) -> str | None:
    """One path parameter of the current match, or *default*."""
    return (params_var.get() or {}).get(name, default)
