"""Resource routes — the conventional CRUD set from one base path.

``router.resource("/posts", PostController)`` registers::

    GET     /posts              index     posts.index
    GET     /posts/create       create    posts.create
    POST    /posts              store     posts.store
    GET     /posts/{id}         show      posts.show
    GET     /posts/{id}/edit    edit      posts.edit
    PUT     /posts/{id}         update    posts.update
    DELETE  /posts/{id}         destroy   posts.destroy

``create`` is registered before ``show`` so ``/posts/create`` is not
swallowed by ``/posts/{id}``.
"""

from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from waypost.errors import ConfigurationError
from waypost.routing.handlers import InstanceMethodRef, TypeMethodRef
from waypost.routing.pattern import normalize_template


@dataclass(frozen=True, slots=True)
class ResourceAction:
    """One row of the resource table."""

    name: str
    method: str
    suffix: str


RESOURCE_ACTIONS: tuple[ResourceAction, ...] = (
    ResourceAction("index", "GET", ""),
    ResourceAction("create", "GET", "/create"),
    ResourceAction("store", "POST", ""),
    ResourceAction("show", "GET", "/{id}"),
    ResourceAction("edit", "GET", "/{id}/edit"),
    ResourceAction("update", "PUT", "/{id}"),
    ResourceAction("destroy", "DELETE", "/{id}"),
)

ACTION_NAMES: frozenset[str] = frozenset(action.name for action in RESOURCE_ACTIONS)

# create and edit only serve HTML forms
API_ACTIONS: frozenset[str] = frozenset({"index", "show", "store", "update", "destroy"})


@dataclass(frozen=True, slots=True)
class ResourceRoute:
    """A route produced by expanding a resource, ready for ``Router.map()``."""

    action: str
    method: str
    path: str
    handler: Any
    name: str


def conventional_name(base_path: str) -> str:
    """Route-name stem for a resource path.

    ``/posts`` -> ``posts``; ``/users/{user}/posts`` -> ``users.posts``.
    """
    parts = [
        part
        for part in base_path.strip("/").split("/")
        if part and not part.startswith("{")
    ]
    return ".".join(parts)


def expand_resource(
    base_path: str,
    source: Any,
    *,
    only: Collection[str] | None = None,
    except_: Collection[str] | None = None,
    names: Mapping[str, str] | None = None,
    name: str | None = None,
) -> Iterator[ResourceRoute]:
    """Yield the resource routes for *source*, in table order.

    *source* is one of:

    - a class, or a ``"module.Class"`` string: each action resolves to
      the method of the same name when a request arrives;
    - an ``{action: handler}`` mapping: only the keys present are
      registered, others are skipped silently;
    - any other object: actions are looked up on that instance.

    *only* / *except_* narrow the action set; table order is kept
    regardless of the order they list actions in. *names* overrides the
    route name of individual actions; *name* replaces the stem derived
    from *base_path*.
    """
    selected = _select_actions(only, except_)
    stem = name if name is not None else conventional_name(base_path)
    base = normalize_template(base_path) if base_path else ""
    if base == "/":
        base = ""

    for action in RESOURCE_ACTIONS:
        if action.name not in selected:
            continue

        if isinstance(source, Mapping):
            if action.name not in source:
                continue
            handler = source[action.name]
        elif isinstance(source, str):
            handler = f"{source}@{action.name}"
        elif isinstance(source, type):
            handler = TypeMethodRef(owner=source, method=action.name)
        else:
            handler = InstanceMethodRef(instance=source, method=action.name)

        route_name = (names or {}).get(action.name) or (
            f"{stem}.{action.name}" if stem else action.name
        )
        yield ResourceRoute(
            action=action.name,
            method=action.method,
            path=f"{base}{action.suffix}" or "/",
            handler=handler,
            name=route_name,
        )


def _select_actions(
    only: Collection[str] | None,
    except_: Collection[str] | None,
) -> frozenset[str]:
    selected = ACTION_NAMES
    for label, given in (("only", only), ("except", except_)):
        if given is None:
            continue
        if isinstance(given, str):
            given = [part for part in given.split("|") if part]
        unknown = set(given) - ACTION_NAMES
        if unknown:
            allowed = ", ".join(a.name for a in RESOURCE_ACTIONS)
            msg = f"Unknown resource action(s) in {label}: {sorted(unknown)}. Allowed: {allowed}."
            raise ConfigurationError(msg)
        selected = selected & set(given) if label == "only" else selected - set(given)
    return selected
