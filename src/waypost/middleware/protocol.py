"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Any: ...

No base class required. The framework checks the shape, not the lineage.

``next`` runs the rest of the chain (inner middleware, then the route
handler) and returns its result. A middleware may run code before and
after ``next``, replace the request it passes on, or skip ``next``
entirely to short-circuit the route.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias

from waypost.http.request import Request

# The rest of the chain, as seen from inside a middleware
Next: TypeAlias = Callable[[Request], Awaitable[Any]]


class Middleware(Protocol):
    """Protocol for waypost middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Any:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireToken:
            async def __call__(self, request: Request, next: Next) -> Any:
                if "authorization" not in request.headers:
                    return Response("Unauthorized", status=401)
                return await next(request)
    """

    async def __call__(self, request: Request, next: Next) -> Any: ...
