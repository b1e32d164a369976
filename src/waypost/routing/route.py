"""Route and MatchResult frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from waypost.routing.handlers import HandlerRef
from waypost.routing.pattern import CompiledPath


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    Created by ``Router.map()`` with the group prefix, middleware, and
    name prefix already applied. Never modified afterwards.
    """

    path: str
    compiled: CompiledPath
    handler: HandlerRef
    methods: frozenset[str]
    middleware: tuple[Callable[..., Any], ...] = ()
    name: str | None = None

    @property
    def param_names(self) -> tuple[str, ...]:
        return self.compiled.param_names

    @property
    def is_static(self) -> bool:
        return self.compiled.is_static

    def allows(self, method: str) -> bool:
        return method in self.methods


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of dispatching one request.

    ``route`` is ``None`` when nothing matched. That is a normal outcome,
    not an error: the dispatcher falls through to the not-found handler.
    """

    route: Route | None = None
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return self.route is not None

    def __bool__(self) -> bool:
        return self.matched
