"""Tests for waypost.routing.dispatcher — running requests through the router."""

from typing import Any

import pytest

from sample_controllers import PostController
from waypost.context import get_request, parameter, parameters, request_var
from waypost.errors import ConfigurationError
from waypost.http.request import Request
from waypost.http.response import Response
from waypost.routing.dispatcher import NotFoundHandlers, build_handler_kwargs
from waypost.routing.router import Router


def _recorder(log: list[str], label: str):
    async def mw(request, next):
        log.append(f"{label}:before")
        result = await next(request)
        log.append(f"{label}:after")
        return result

    return mw


@pytest.mark.anyio
class TestRun:
    async def test_sync_handler(self) -> None:
        router = Router()
        router.get("/", lambda: "hello")
        assert await router.run(Request.create("GET", "/")) == "hello"

    async def test_async_handler(self) -> None:
        async def index() -> str:
            return "async hello"

        router = Router()
        router.get("/", index)
        assert await router.run(Request.create("GET", "/")) == "async hello"

    async def test_run_compiles(self) -> None:
        router = Router()
        router.get("/", lambda: "hi")
        await router.run(Request.create("GET", "/"))
        assert router.compiled

    async def test_path_params_as_kwargs(self) -> None:
        def show(user, post):
            return f"{user}/{post}"

        router = Router()
        router.get("/users/{user}/posts/{post}", show)
        assert await router.run(Request.create("GET", "/users/ann/posts/7")) == "ann/7"

    async def test_annotated_param_converted(self) -> None:
        def show(id: int) -> int:
            return id

        router = Router()
        router.get("/posts/{id:num}", show)
        assert await router.run(Request.create("GET", "/posts/42")) == 42

    async def test_request_injected(self) -> None:
        def show(request: Request, id: str) -> str:
            return f"{request.method} {request.path} {id}"

        router = Router()
        router.get("/posts/{id}", show)
        assert await router.run(Request.create("GET", "/posts/9")) == "GET /posts/9 9"

    async def test_request_injected_by_annotation(self) -> None:
        def show(req: Request) -> dict[str, str]:
            return req.path_params

        router = Router()
        router.get("/posts/{id}", show)
        assert await router.run(Request.create("GET", "/posts/9")) == {"id": "9"}

    async def test_var_kwargs_receive_all_params(self) -> None:
        def show(**params: Any) -> dict[str, Any]:
            return params

        router = Router()
        router.get("/{a}/{b}", show)
        assert await router.run(Request.create("GET", "/x/y")) == {"a": "x", "b": "y"}

    async def test_query_string_ignored_for_matching(self) -> None:
        router = Router()
        router.get("/search", lambda request: request.query_string)
        assert await router.run(Request.create("GET", "/search?q=hi")) == "q=hi"

    async def test_class_method_string_handler(self) -> None:
        router = Router()
        router.get("/posts/{id}", "sample_controllers.PostController@show")
        assert await router.run(Request.create("GET", "/posts/3")) == "posts.show 3"

    async def test_instance_pair_handler(self) -> None:
        router = Router()
        router.get("/posts", (PostController(), "index"))
        assert await router.run(Request.create("GET", "/posts")) == "posts.index"

    async def test_resource_dispatch(self) -> None:
        router = Router()
        router.resource("/posts", PostController)
        assert await router.run(Request.create("PUT", "/posts/5")) == "posts.update 5"
        assert await router.run(Request.create("GET", "/posts/create")) == "posts.create"

    async def test_handler_exception_propagates(self) -> None:
        def broken() -> None:
            raise KeyError("boom")

        router = Router()
        router.get("/", broken)
        with pytest.raises(KeyError):
            await router.run(Request.create("GET", "/"))

    async def test_ambient_request(self) -> None:
        router = Router()
        router.get("/ambient", lambda: "found")
        token = request_var.set(Request.create("GET", "/ambient"))
        try:
            assert await router.run() == "found"
        finally:
            request_var.reset(token)


@pytest.mark.anyio
class TestMiddleware:
    async def test_route_middleware_order(self) -> None:
        log: list[str] = []

        def handler() -> str:
            log.append("handler")
            return "ok"

        router = Router(middleware=_recorder(log, "router"))
        with router.group("/g", middleware=[_recorder(log, "group")]):
            router.get("/r", handler, middleware=[_recorder(log, "route")])

        assert await router.run(Request.create("GET", "/g/r")) == "ok"
        assert log == [
            "router:before",
            "group:before",
            "route:before",
            "handler",
            "route:after",
            "group:after",
            "router:after",
        ]

    async def test_short_circuit(self) -> None:
        called: list[bool] = []

        def handler() -> str:
            called.append(True)
            return "secret"

        async def deny(request, next):
            return Response("Forbidden", status=403)

        router = Router()
        router.get("/admin", handler, middleware=deny)
        result = await router.run(Request.create("GET", "/admin"))
        assert result.status == 403
        assert called == []

    async def test_pass_through_preserves_result(self) -> None:
        sentinel = object()

        async def passthrough(request, next):
            return await next(request)

        router = Router()
        router.get("/", lambda: sentinel, middleware=passthrough)
        assert await router.run(Request.create("GET", "/")) is sentinel

    async def test_router_middleware_can_rewrite_before_match(self) -> None:
        async def to_delete(request, next):
            return await next(request.with_method("DELETE"))

        router = Router()
        router.use(to_delete)
        router.delete("/posts/{id}", lambda id: f"deleted {id}")
        assert await router.run(Request.create("POST", "/posts/1")) == "deleted 1"

    async def test_router_middleware_wraps_not_found(self) -> None:
        log: list[str] = []
        router = Router()
        router.use(_recorder(log, "router"))
        result = await router.run(Request.create("GET", "/missing"))
        assert result.status == 404
        assert log == ["router:before", "router:after"]

    async def test_route_middleware_sees_path_params(self) -> None:
        async def check(request, next):
            return f"{request.path_params['id']}:{await next(request)}"

        router = Router()
        router.get("/posts/{id}", lambda id: "body", middleware=check)
        assert await router.run(Request.create("GET", "/posts/4")) == "4:body"

    async def test_import_string_middleware(self) -> None:
        router = Router()
        router.get("/", lambda: "body", middleware="sample_controllers:stamp")
        assert await router.run(Request.create("GET", "/")) == "body+stamped"


@pytest.mark.anyio
class TestNotFound:
    async def test_default_404(self) -> None:
        result = await Router().run(Request.create("GET", "/nowhere"))
        assert isinstance(result, Response)
        assert result.status == 404

    async def test_method_mismatch_is_not_found(self) -> None:
        router = Router()
        router.get("/posts", lambda: "list")
        result = await router.run(Request.create("DELETE", "/posts"))
        assert result.status == 404

    async def test_default_handler(self) -> None:
        router = Router()
        router.not_found(lambda request: f"no {request.path}")
        assert await router.run(Request.create("GET", "/x")) == "no /x"

    async def test_prefix_rules(self) -> None:
        router = Router()
        router.not_found({"/api": lambda: "api missing"})
        router.not_found(lambda: "page missing")
        assert await router.run(Request.create("GET", "/api/users")) == "api missing"
        assert await router.run(Request.create("GET", "/api")) == "api missing"
        assert await router.run(Request.create("GET", "/apix")) == "page missing"

    async def test_pattern_rule_passes_params(self) -> None:
        router = Router()
        router.not_found({"/docs/{page:all}": lambda page: f"no doc {page}"})
        assert await router.run(Request.create("GET", "/docs/a/b")) == "no doc a/b"

    async def test_first_rule_wins(self) -> None:
        router = Router()
        router.not_found({"/api/v1": lambda: "v1", "/api": lambda: "api"})
        assert await router.run(Request.create("GET", "/api/v1/x")) == "v1"
        assert await router.run(Request.create("GET", "/api/v2/x")) == "api"

    async def test_route_middleware_not_applied(self) -> None:
        async def deny(request, next):
            return "denied"

        router = Router()
        router.get("/admin", lambda: "admin", middleware=deny)
        router.not_found(lambda: "missing")
        assert await router.run(Request.create("GET", "/other")) == "missing"


class TestNotFoundHandlers:
    def test_empty(self) -> None:
        handlers = NotFoundHandlers()
        assert not handlers
        assert handlers.select("/x") == (None, {})

    def test_prefix_is_case_insensitive(self) -> None:
        handlers = NotFoundHandlers()
        handlers.register({"/API": lambda: "api"})
        handler, params = handlers.select("/api/things")
        assert handler is not None
        assert params == {}

    def test_root_prefix_catches_all(self) -> None:
        handlers = NotFoundHandlers()
        handlers.register({"/": lambda: "any"})
        assert handlers.select("/whatever")[0] is not None

    def test_key_without_leading_slash(self) -> None:
        handlers = NotFoundHandlers()
        handlers.register({"api": lambda: "api", "docs/{page:all}": lambda page: page})
        assert handlers.select("/api/x")[0] is not None
        assert handlers.select("/docs/a/b")[1] == {"page": "a/b"}

    def test_case_sensitive_keys(self) -> None:
        handlers = NotFoundHandlers(case_sensitive=True)
        handlers.register({"/API": lambda: "api", "/Docs/{page}": lambda page: page})
        assert handlers.select("/api/x") == (None, {})
        assert handlers.select("/docs/a") == (None, {})
        assert handlers.select("/API/x")[0] is not None
        assert handlers.select("/Docs/a")[1] == {"page": "a"}


@pytest.mark.anyio
class TestContext:
    async def test_parameters_inside_handler(self) -> None:
        def show() -> tuple[dict[str, str], str | None, str | None]:
            return parameters(), parameter("id"), parameter("missing")

        router = Router()
        router.get("/posts/{id}", show)
        assert await router.run(Request.create("GET", "/posts/8")) == ({"id": "8"}, "8", None)

    async def test_get_request_inside_handler(self) -> None:
        router = Router()
        router.get("/here", lambda: get_request().path)
        assert await router.run(Request.create("GET", "/here")) == "/here"

    async def test_context_reset_after_run(self) -> None:
        router = Router()
        router.get("/posts/{id}", lambda id: id)
        await router.run(Request.create("GET", "/posts/1"))
        assert parameters() == {}
        with pytest.raises(LookupError):
            get_request()

    async def test_optional_param_absent(self) -> None:
        router = Router()
        router.get("/archive/{year:num}?", lambda: parameters())
        assert await router.run(Request.create("GET", "/archive")) == {}


class TestBuildHandlerKwargs:
    def test_unknown_params_dropped(self) -> None:
        def show(id):
            return id

        kwargs = build_handler_kwargs(show, Request("GET", "/"), {"id": "1", "extra": "2"})
        assert kwargs == {"id": "1"}

    def test_unconvertible_value_left_as_string(self) -> None:
        def show(id: int):
            return id

        assert build_handler_kwargs(show, Request("GET", "/"), {"id": "x"}) == {"id": "x"}

    def test_uninspectable_handler(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot inspect"):
            build_handler_kwargs(object(), Request("GET", "/"), {})
