"""Waypost exception hierarchy.

Shared across Router, App, dispatcher, and middleware so every module
raises and catches the same types.

Registration problems surface as ``ConfigurationError`` while the app is
being wired up. A request that matches no route is *not* an error: the
dispatcher returns an empty ``MatchResult`` and runs the not-found handler.
"""

from dataclasses import dataclass


class WaypostError(Exception):
    """Base for all waypost-specific errors."""


class ConfigurationError(WaypostError):
    """Raised when a route, group, or middleware registration is invalid.

    Typically raised at import time while routes are being declared, so
    a broken route table never reaches the request-serving phase.
    """


class RouteNotFoundError(WaypostError, LookupError):
    """Raised by ``url_for()`` when no route carries the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No route named {name!r} is registered.")


class URLBuildError(WaypostError, ValueError):
    """Raised by ``url_for()`` when the arguments don't fit the template."""


@dataclass(slots=True)
class HTTPError(WaypostError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or middleware. The ASGI host catches these and
    turns them into a plain response with the given status. Not frozen:
    context managers reassign ``__traceback__`` on exceptions passing through.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — raised by a handler that wants the standard not-found response."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
