"""Request dispatch — match, compose, invoke.

One call to ``run_request()`` handles one request:

1. router-level middleware wraps everything (it may rewrite the request
   before matching, or answer without ever reaching a route);
2. the route table is consulted once;
3. on a match, the route's own middleware chain wraps its handler;
4. otherwise the not-found handler is selected and invoked.

No state survives the call. The current request and the matched
parameters live in context variables that are reset on the way out.
"""

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from waypost._internal.invoke import invoke
from waypost._internal.types import NotFoundTarget
from waypost.context import params_var, request_var
from waypost.errors import ConfigurationError
from waypost.http.request import Request
from waypost.http.response import Response
from waypost.middleware.compose import compose
from waypost.routing.handlers import HandlerRef, as_handler_ref
from waypost.routing.pattern import CompiledPath, compile_path, normalize_path, normalize_template
from waypost.routing.route import Route
from waypost.routing.table import RouteTable

logger = logging.getLogger("waypost.routing")


class NotFoundHandlers:
    """Ordered (prefix-or-pattern -> handler) rules plus a default.

    Rule keys containing a placeholder are compiled and must match the
    whole path; other keys match as path prefixes, segment by segment
    (``/api`` covers ``/api`` and ``/api/users`` but not ``/apix``).
    """

    __slots__ = ("_case_sensitive", "_default", "_rules")

    def __init__(self, *, case_sensitive: bool = False) -> None:
        self._case_sensitive = case_sensitive
        self._default: HandlerRef | None = None
        self._rules: list[tuple[str, CompiledPath | None, HandlerRef]] = []

    def __bool__(self) -> bool:
        return self._default is not None or bool(self._rules)

    def register(self, target: NotFoundTarget, namespace: str = "") -> None:
        if isinstance(target, Mapping):
            for key, handler in target.items():
                prefix = normalize_template(key)
                compiled = (
                    compile_path(prefix, case_sensitive=self._case_sensitive)
                    if "{" in prefix
                    else None
                )
                self._rules.append((prefix, compiled, as_handler_ref(handler, namespace)))
            return
        self._default = as_handler_ref(target, namespace)

    def select(self, path: str) -> tuple[HandlerRef | None, dict[str, str]]:
        """Pick the handler for an unmatched *path*, first rule wins."""
        path = normalize_path(path)
        for prefix, compiled, handler in self._rules:
            if compiled is not None:
                params = compiled.match(path)
                if params is not None:
                    return handler, params
            elif self._has_prefix(path, prefix):
                return handler, {}
        return self._default, {}

    def _has_prefix(self, path: str, prefix: str) -> bool:
        if prefix == "/":
            return True
        if not self._case_sensitive:
            path, prefix = path.lower(), prefix.lower()
        return path == prefix or path.startswith(f"{prefix}/")


async def run_request(
    request: Request,
    *,
    table: RouteTable,
    middleware: Sequence[Callable[..., Any]] = (),
    not_found: NotFoundHandlers | None = None,
) -> Any:
    """Process a single request through router middleware and routing.

    Returns whatever the handler (or a short-circuiting middleware)
    returned. Exceptions from handlers and middleware propagate.
    """
    token = request_var.set(request)
    try:

        async def route_request(req: Request) -> Any:
            match = table.match(req.method, req.path)
            if match.route is None:
                logger.debug("No route for %s %s", req.method, req.path)
                return await _run_not_found(req, not_found)
            logger.debug(
                "Matched %s %s -> %s %s", req.method, req.path, match.route.path, match.parameters
            )
            return await _run_route(match.route, match.parameters, req)

        chain = compose(route_request, middleware)
        return await chain(request)
    finally:
        request_var.reset(token)


async def _run_route(route: Route, params: dict[str, str], request: Request) -> Any:
    request = request.with_path_params(params)
    token = params_var.set(params)
    try:

        async def endpoint(req: Request) -> Any:
            return await call_handler(route.handler, req, req.path_params)

        chain = compose(endpoint, route.middleware)
        return await chain(request)
    finally:
        params_var.reset(token)


async def _run_not_found(request: Request, not_found: NotFoundHandlers | None) -> Any:
    handler, params = not_found.select(request.path) if not_found else (None, {})
    if handler is None:
        return Response("Not Found", status=404)
    token = params_var.set(params)
    try:
        return await call_handler(handler, request.with_path_params(params), params)
    finally:
        params_var.reset(token)


async def call_handler(ref: HandlerRef, request: Request, params: dict[str, str]) -> Any:
    """Resolve *ref* and call it with the arguments it asks for."""
    func = ref.resolve()
    kwargs = build_handler_kwargs(func, request, params)
    return await invoke(func, **kwargs)


def build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    params: Mapping[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type when
       the annotation is a plain class such as ``int``)
    3. Remaining path parameters, if the handler takes ``**kwargs``
    """
    try:
        sig = inspect.signature(handler, eval_str=True)
    except (TypeError, ValueError) as exc:
        msg = f"Cannot inspect handler {handler!r}: {exc}"
        raise ConfigurationError(msg) from exc

    kwargs: dict[str, Any] = {}
    takes_var_kwargs = False

    for name, param in sig.parameters.items():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            takes_var_kwargs = True
            continue
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            continue
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in params:
            kwargs[name] = _convert(params[name], param.annotation)

    if takes_var_kwargs:
        for name, value in params.items():
            kwargs.setdefault(name, value)

    return kwargs


def _convert(value: str, annotation: Any) -> Any:
    if annotation is inspect.Parameter.empty or annotation is str:
        return value
    if not isinstance(annotation, type):
        return value
    try:
        return annotation(value)
    except (ValueError, TypeError):
        return value
