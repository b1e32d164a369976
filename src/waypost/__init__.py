"""Waypost — HTTP request routing and middleware dispatch.

Placeholder path patterns, ordered first-match dispatch, route groups,
resource routes, named routes with reverse URL building, and composable
request middleware. Served over ASGI.

Basic usage::

    from waypost import App

    app = App()
    app.router.get("/", lambda: "Hello, World!")
    app.router.get("/posts/{id:num}", show_post, name="posts.show")

    app.router.url_for("posts.show", 42)  # "/posts/42"
"""

__version__ = "0.1.0"

__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RouteNotFoundError",
    "Router",
    "URLBuildError",
    "WaypostError",
    "get_request",
    "parameter",
    "parameters",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypost`` fast while providing a clean top-level API.
    """
    if name == "App":
        from waypost.app import App

        return App
    if name == "AppConfig":
        from waypost.config import AppConfig

        return AppConfig
    if name == "Router":
        from waypost.routing.router import Router

        return Router
    if name == "Request":
        from waypost.http.request import Request

        return Request
    if name in ("Response", "Redirect"):
        from waypost.http import response as _resp

        return getattr(_resp, name)
    if name in ("Middleware", "Next"):
        from waypost.middleware import protocol as _mw

        return getattr(_mw, name)
    if name in ("get_request", "parameter", "parameters"):
        from waypost import context as _ctx

        return getattr(_ctx, name)
    if name in (
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "RouteNotFoundError",
        "URLBuildError",
        "WaypostError",
    ):
        from waypost import errors as _errors

        return getattr(_errors, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
