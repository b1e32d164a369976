"""Shared type aliases used across waypost modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Middleware as given at registration: callable, alias, or import string
MiddlewareRef: TypeAlias = Callable[..., Any] | str

# Not-found handler, or an ordered mapping of path prefix/pattern -> handler
NotFoundTarget: TypeAlias = Handler | Mapping[str, Handler]
