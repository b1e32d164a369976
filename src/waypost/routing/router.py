"""The router — registration API plus dispatch.

Registration happens once, at startup, and only accumulates data::

    router = Router()
    router.middleware_alias("auth", require_login)

    router.get("/", home)
    router.get("/posts/{id:num}", show_post, name="posts.show")

    with router.group("/admin", middleware="auth", name="admin."):
        router.resource("/posts", "app.controllers.admin.PostController")

    router.not_found(page_not_found)

Dispatch is separate and never writes to the route table::

    match = router.dispatch("GET", "/posts/42")   # pure lookup
    result = await router.run(request)            # lookup + middleware + handler
"""

import logging
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping
from typing import Any

from waypost._internal.types import Handler, MiddlewareRef, NotFoundTarget
from waypost.context import get_request
from waypost.errors import ConfigurationError
from waypost.http.request import Request
from waypost.middleware.compose import resolve_middleware
from waypost.routing.dispatcher import NotFoundHandlers, run_request
from waypost.routing.groups import GroupFrame, GroupStack
from waypost.routing.handlers import as_handler_ref
from waypost.routing.names import NameRegistry
from waypost.routing.pattern import compile_path, normalize_template
from waypost.routing.resources import API_ACTIONS, expand_resource
from waypost.routing.route import MatchResult, Route
from waypost.routing.table import RouteTable

logger = logging.getLogger("waypost.routing")

ANY_METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def parse_methods(methods: str | Iterable[str]) -> frozenset[str]:
    """Normalize ``"GET|POST"`` or ``["get", "post"]`` to upper-case tokens."""
    if isinstance(methods, str):
        methods = methods.split("|")
    tokens = frozenset(m.strip().upper() for m in methods if m and m.strip())
    if not tokens:
        msg = "A route needs at least one HTTP method."
        raise ConfigurationError(msg)
    return tokens


class Router:
    """Ordered route table with groups, named routes, and middleware.

    Usage::

        router = Router()
        router.get("/users/{id:num}", show_user, name="users.show")
        router.compile()
        router.dispatch("GET", "/users/42").parameters  # {"id": "42"}

    Thread safety:
        Registration is single-threaded (import time). After
        ``compile()`` the router is read-only and ``dispatch()`` /
        ``run()`` may be called from any number of threads or tasks.
    """

    __slots__ = (
        "_aliases",
        "_case_sensitive",
        "_compiled",
        "_groups",
        "_middleware",
        "_names",
        "_not_found",
        "_table",
    )

    def __init__(
        self,
        *,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        case_sensitive: bool = False,
    ) -> None:
        self._table = RouteTable(case_sensitive=case_sensitive)
        self._names = NameRegistry()
        self._groups = GroupStack()
        self._aliases: dict[str, Callable[..., Any]] = {}
        self._middleware: list[Callable[..., Any]] = list(resolve_middleware(middleware))
        self._not_found = NotFoundHandlers(case_sensitive=case_sensitive)
        self._case_sensitive = case_sensitive
        self._compiled = False

    # -- Middleware --

    def middleware_alias(self, name: str, middleware: Callable[..., Any]) -> None:
        """Make *middleware* available by *name* in later registrations."""
        self._check_not_compiled()
        if not callable(middleware):
            msg = f"Middleware alias {name!r} must be callable, got {type(middleware).__name__}"
            raise ConfigurationError(msg)
        self._aliases[name] = middleware

    def use(self, middleware: MiddlewareRef | Iterable[MiddlewareRef]) -> None:
        """Add router-level middleware.

        Router-level middleware wraps every request, matched or not, and
        runs before the route is looked up.
        """
        self._check_not_compiled()
        self._middleware.extend(resolve_middleware(middleware, self._aliases))

    # -- Route registration --

    def map(
        self,
        methods: str | Iterable[str],
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        """Register *handler* for *methods* on *path*.

        The active groups contribute their path prefix, middleware (ahead
        of the route's own), name prefix, and handler namespace.
        """
        self._check_not_compiled()
        method_set = parse_methods(methods)
        full_path = normalize_template(f"{self._groups.prefix}{path}")
        route_middleware = self._groups.middleware + resolve_middleware(
            middleware, self._aliases
        )
        full_name = f"{self._groups.name_prefix}{name}" if name else None
        compiled = compile_path(full_path, case_sensitive=self._case_sensitive)

        route = Route(
            path=full_path,
            compiled=compiled,
            handler=as_handler_ref(handler, self._groups.namespace),
            methods=method_set,
            middleware=route_middleware,
            name=full_name,
        )
        if full_name is not None:
            self._names.add(full_name, compiled)
        self._table.add(route)

        logger.debug(
            "Registered %s %s -> %s%s",
            "|".join(sorted(method_set)),
            full_path,
            route.handler.label,
            f" ({full_name})" if full_name else "",
        )
        return route

    def get(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("GET", path, handler, middleware, name=name)

    def post(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("POST", path, handler, middleware, name=name)

    def put(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("PUT", path, handler, middleware, name=name)

    def patch(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("PATCH", path, handler, middleware, name=name)

    def delete(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("DELETE", path, handler, middleware, name=name)

    def options(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("OPTIONS", path, handler, middleware, name=name)

    def head(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        return self.map("HEAD", path, handler, middleware, name=name)

    def any(
        self,
        path: str,
        handler: Any,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        *,
        name: str | None = None,
    ) -> Route:
        """Register for GET, POST, PUT, PATCH, and DELETE."""
        return self.map(ANY_METHODS, path, handler, middleware, name=name)

    def route(
        self,
        path: str,
        *,
        methods: str | Iterable[str] = ("GET",),
        name: str | None = None,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path template. Use ``{param}`` or ``{param:type}``.
            methods: HTTP methods, as a list or ``"GET|POST"``.
            name: Optional route name for ``url_for()``.
            middleware: Route-local middleware, after any group middleware.
        """

        def decorator(func: Handler) -> Handler:
            self.map(methods, path, func, middleware, name=name)
            return func

        return decorator

    # -- Groups --

    def group(
        self,
        prefix: str = "",
        callback: Callable[[], Any] | None = None,
        *,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
        name: str = "",
        namespace: str = "",
    ) -> Any:
        """Register routes under a shared prefix, middleware, and name prefix.

        Call with a zero-argument *callback* that registers the routes::

            router.group("/admin", lambda: router.get("", dashboard))

        or omit it and use the returned context manager::

            with router.group("/admin", middleware=[require_admin]):
                router.get("", dashboard)

        *namespace* is prepended to ``"Class@method"`` handler strings
        registered inside the group. The group's state is removed when
        the callback or ``with`` block exits, even by exception.
        """
        self._check_not_compiled()
        frame = GroupFrame(
            prefix=prefix,
            middleware=resolve_middleware(middleware, self._aliases),
            name_prefix=name,
            namespace=namespace,
        )
        if callback is None:
            return self._groups.push(frame)
        with self._groups.push(frame):
            callback()
        return None

    # -- Resources --

    def resource(
        self,
        path: str,
        source: Any,
        *,
        only: Collection[str] | None = None,
        except_: Collection[str] | None = None,
        names: Mapping[str, str] | None = None,
        name: str | None = None,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
    ) -> list[Route]:
        """Register the conventional CRUD routes for *source* under *path*.

        See ``waypost.routing.resources`` for the action table and the
        accepted *source* shapes.
        """
        return [
            self.map(item.method, item.path, item.handler, middleware, name=item.name)
            for item in expand_resource(
                path, source, only=only, except_=except_, names=names, name=name
            )
        ]

    def api_resource(
        self,
        path: str,
        source: Any,
        *,
        only: Collection[str] | None = None,
        except_: Collection[str] | None = None,
        names: Mapping[str, str] | None = None,
        name: str | None = None,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
    ) -> list[Route]:
        """Like ``resource()`` without the HTML-form actions ``create`` and ``edit``."""
        return self.resource(
            path,
            source,
            only=API_ACTIONS if only is None else only,
            except_=except_,
            names=names,
            name=name,
            middleware=middleware,
        )

    # -- Not found --

    def not_found(self, handler: NotFoundTarget) -> None:
        """Set the handler for requests that match no route.

        Pass a single handler for the default, or an ordered mapping of
        path prefix (or pattern) to handler::

            router.not_found({"/api": api_not_found, "/docs/{page:all}": missing_doc})
            router.not_found(page_not_found)
        """
        self._check_not_compiled()
        self._not_found.register(handler, self._groups.namespace)

    # -- Named routes --

    def url_for(self, name: str, *args: Any) -> str:
        """Build the path of route *name*, filling placeholders in order.

        Raises ``RouteNotFoundError`` if no route has that name.
        """
        return self._names.url_for(name, *args)

    def has_route(self, name: str) -> bool:
        return name in self._names

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration (= matching priority) order."""
        return tuple(self._table)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    # -- Lifecycle --

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        if not self._compiled:
            logger.debug("Router compiled with %d route(s)", len(self._table))
        self._compiled = True

    # -- Dispatch --

    def dispatch(self, method: str, path: str) -> MatchResult:
        """Match *method* and *path* against the route table.

        Pure lookup: no handler is called and nothing is mutated.
        """
        return self._table.match(method, path)

    async def run(self, request: Request | None = None) -> Any:
        """Dispatch *request* (default: the ambient request) and run it.

        Invokes the matched route's middleware chain and handler, or the
        not-found handler, and returns the result. Freezes the router on
        first use.
        """
        if request is None:
            request = get_request()
        self.compile()
        return await run_request(
            request,
            table=self._table,
            middleware=tuple(self._middleware),
            not_found=self._not_found,
        )

    # -- Internal --

    def _check_not_compiled(self) -> None:
        if self._compiled:
            msg = (
                "Cannot modify the router after it has started serving requests. "
                "Register routes, groups, and middleware before the first dispatch."
            )
            raise RuntimeError(msg)
