"""ASGI application — a Router plus configuration, served over ASGI.

Lifecycle:
    1. Registration: build routes on ``app.router`` (or pass a Router in)
    2. Freeze: first request or lifespan startup compiles the router
    3. Serve: each HTTP scope goes through ``handle_request()``
"""

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any

from waypost._internal.asgi import Receive, Scope, Send
from waypost.config import AppConfig
from waypost.routing.router import Router
from waypost.server.handler import handle_request

logger = logging.getLogger("waypost.server")


class App:
    """The waypost application.

    Usage::

        app = App(config=AppConfig(method_override=True))
        app.router.get("/", index)
        app.router.resource("/posts", PostController)

    Mutable during setup. Frozen on the first request or at lifespan
    startup, after which the router rejects new registrations.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "router",
    )

    def __init__(self, config: AppConfig | None = None, router: Router | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router: Router = router if router is not None else Router()
        self._startup_hooks: list[Callable[[], Any]] = []
        self._shutdown_hooks: list[Callable[[], Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[[], Any]) -> Callable[[], Any]:
        """Register a sync or async hook run during lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[[], Any]) -> Callable[[], Any]:
        """Register a sync or async hook run during lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(scope, receive, send, router=self.router, config=self.config)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self._run_hooks(self._startup_hooks)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self._run_hooks(self._shutdown_hooks)
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _run_hooks(self, hooks: list[Callable[[], Any]]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking.

        Several server threads may deliver the first request at once;
        exactly one of them compiles.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """MUST only be called while holding _freeze_lock."""
        logging.getLogger("waypost").setLevel(self.config.log_level.upper())
        self.router.compile()
        self._frozen = True
        logger.debug("App frozen with %d route(s)", len(self.router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register hooks before the first request."
            )
            raise RuntimeError(msg)
