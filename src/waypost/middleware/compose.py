"""Onion composition of middleware around an endpoint.

``compose(endpoint, [a, b, c])`` produces a single callable that runs::

    a -> b -> c -> endpoint -> c -> b -> a

The first middleware in the list is the outermost layer. A layer that
never calls ``next`` stops the chain there: the endpoint and every layer
after it are skipped.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from waypost._internal.imports import import_string
from waypost._internal.invoke import invoke
from waypost._internal.types import MiddlewareRef
from waypost.errors import ConfigurationError
from waypost.http.request import Request
from waypost.middleware.protocol import Next


def compose(endpoint: Next, middleware: Sequence[Callable[..., Any]]) -> Next:
    """Wrap *endpoint* in *middleware*, first item outermost.

    Folds from the last middleware to the first so each layer receives
    the already-wrapped remainder of the chain as its ``next``.
    Sync and async middleware can be mixed freely.
    """
    handler = endpoint
    for mw in reversed(middleware):
        outer = handler

        async def layer(req: Request, _mw: Any = mw, _next: Next = outer) -> Any:
            return await invoke(_mw, req, _next)

        handler = layer

    return handler


def resolve_middleware(
    refs: MiddlewareRef | Iterable[MiddlewareRef] | None,
    aliases: Mapping[str, Callable[..., Any]] | None = None,
) -> tuple[Callable[..., Any], ...]:
    """Turn registration-time middleware references into callables.

    Accepts a single reference or an iterable of them. Each reference is
    a callable, a name from *aliases*, or an import string
    (``"pkg.module:attr"``). Strings may hold several names separated by
    ``|``, e.g. ``"auth|csrf"``.

    Raises ``ConfigurationError`` for anything that doesn't resolve to a
    callable.
    """
    if refs is None:
        return ()
    if isinstance(refs, str) or callable(refs):
        refs = [refs]
    elif isinstance(refs, Mapping) or not isinstance(refs, Iterable):
        msg = f"Middleware must be callable, a name or a list of them, got {type(refs).__name__}"
        raise ConfigurationError(msg)

    resolved: list[Callable[..., Any]] = []
    for ref in refs:
        if isinstance(ref, str):
            names = [name.strip() for name in ref.split("|") if name.strip()]
            resolved.extend(_resolve_name(name, aliases or {}) for name in names)
        elif callable(ref):
            resolved.append(ref)
        else:
            msg = f"Middleware must be callable or a name, got {type(ref).__name__}: {ref!r}"
            raise ConfigurationError(msg)
    return tuple(resolved)


def _resolve_name(name: str, aliases: Mapping[str, Callable[..., Any]]) -> Callable[..., Any]:
    if name in aliases:
        return aliases[name]

    if ":" not in name and "." not in name:
        known = ", ".join(sorted(aliases)) or "none registered"
        msg = f"Unknown middleware {name!r} (aliases: {known})."
        raise ConfigurationError(msg)

    try:
        obj = import_string(name)
    except (ImportError, AttributeError, ValueError) as exc:
        msg = f"Cannot import middleware {name!r}: {exc}"
        raise ConfigurationError(msg) from exc

    if not callable(obj):
        msg = f"Middleware {name!r} resolved to {type(obj).__name__}, which is not callable."
        raise ConfigurationError(msg)
    return obj
