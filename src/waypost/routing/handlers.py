"""Handler references — what a route points at.

A route can point at three kinds of handler::

    router.get("/", index)                                # CallableRef
    router.get("/posts", "app.controllers.Posts@index")   # TypeMethodRef
    router.get("/posts", (Posts, "index"))                # TypeMethodRef
    router.get("/posts", (posts_controller, "index"))     # InstanceMethodRef

References are stored as-is at registration and resolved to a callable
only when a request actually reaches the route, so importing the route
table never imports every controller.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from waypost._internal.imports import import_string
from waypost.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class CallableRef:
    """A plain function, bound method, or callable object."""

    func: Callable[..., Any]

    def resolve(self) -> Callable[..., Any]:
        return self.func

    @property
    def label(self) -> str:
        return getattr(self.func, "__qualname__", None) or repr(self.func)


@dataclass(frozen=True, slots=True)
class TypeMethodRef:
    """A method on a class, given as the class or its import path.

    Static and class methods are called on the class itself. Anything
    else gets a fresh instance (no constructor arguments) per call.
    """

    owner: type | str
    method: str

    def resolve(self) -> Callable[..., Any]:
        cls = self._owner_class()
        try:
            attr = inspect.getattr_static(cls, self.method)
        except AttributeError as exc:
            msg = f"{cls.__qualname__} has no method {self.method!r}"
            raise ConfigurationError(msg) from exc
        if isinstance(attr, (staticmethod, classmethod)):
            return getattr(cls, self.method)
        return getattr(cls(), self.method)

    def _owner_class(self) -> type:
        if not isinstance(self.owner, str):
            return self.owner
        try:
            cls = import_string(self.owner)
        except (ImportError, AttributeError, ValueError) as exc:
            msg = f"Cannot import handler class {self.owner!r}: {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(cls, type):
            msg = f"{self.owner!r} resolved to {type(cls).__name__}, not a class"
            raise ConfigurationError(msg)
        return cls

    @property
    def label(self) -> str:
        owner = self.owner if isinstance(self.owner, str) else self.owner.__qualname__
        return f"{owner}@{self.method}"


@dataclass(frozen=True, slots=True)
class InstanceMethodRef:
    """A method looked up by name on a live object."""

    instance: Any
    method: str

    def resolve(self) -> Callable[..., Any]:
        func = getattr(self.instance, self.method, None)
        if not callable(func):
            msg = f"{type(self.instance).__qualname__} has no callable {self.method!r}"
            raise ConfigurationError(msg)
        return func

    @property
    def label(self) -> str:
        return f"{type(self.instance).__qualname__}.{self.method}"


HandlerRef: TypeAlias = CallableRef | TypeMethodRef | InstanceMethodRef


def as_handler_ref(value: Any, namespace: str = "") -> HandlerRef:
    """Coerce a registration-time handler into a ``HandlerRef``.

    *namespace* is the active group namespace. It is prepended to the
    class path of ``"Class@method"`` strings only.

    Raises ``ConfigurationError`` for anything that can't be a handler.
    """
    if isinstance(value, CallableRef | TypeMethodRef | InstanceMethodRef):
        return value

    if isinstance(value, str):
        owner, sep, method = value.partition("@")
        if not sep or not owner or not method:
            msg = (
                f"Handler string {value!r} must look like 'module.Class@method'. "
                "Pass functions directly instead of by name."
            )
            raise ConfigurationError(msg)
        return TypeMethodRef(owner=f"{namespace}{owner}", method=method)

    if isinstance(value, tuple | list):
        if len(value) != 2 or not isinstance(value[1], str):
            msg = f"Handler pair must be (class_or_instance, 'method'), got {value!r}"
            raise ConfigurationError(msg)
        owner, method = value
        if isinstance(owner, str):
            return TypeMethodRef(owner=f"{namespace}{owner}", method=method)
        if isinstance(owner, type):
            return TypeMethodRef(owner=owner, method=method)
        return InstanceMethodRef(instance=owner, method=method)

    if callable(value):
        return CallableRef(value)

    msg = f"Route handler must be callable, 'Class@method', or a pair, got {type(value).__name__}"
    raise ConfigurationError(msg)
