"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Any

Middleware is attached to routes and groups at registration time and
composed around the route handler per request (first listed runs
outermost).
"""

from waypost.middleware.compose import compose, resolve_middleware
from waypost.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "Next",
    "compose",
    "resolve_middleware",
]
