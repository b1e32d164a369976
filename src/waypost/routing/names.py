"""Named routes and URL reversal.

``url_for()`` fills a route's placeholders by position, left to right::

    router.get("/posts/{id:num}/{slug}", show, name="posts.show")
    router.url_for("posts.show", 5, "hello-world")  # "/posts/5/hello-world"

Arguments are matched to placeholders by order, not by name. A trailing
optional placeholder may be left out, in which case its separator is
dropped as well.
"""

from typing import Any
from urllib.parse import quote

from waypost.errors import ConfigurationError, RouteNotFoundError, URLBuildError
from waypost.routing.pattern import CompiledPath, Placeholder


class NameRegistry:
    """Maps route names to their compiled templates."""

    __slots__ = ("_names",)

    def __init__(self) -> None:
        self._names: dict[str, CompiledPath] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str, compiled: CompiledPath) -> None:
        """Register *name*. Names are unique across the whole router."""
        if name in self._names:
            existing = self._names[name].template
            msg = f"Route name {name!r} is already used by {existing!r}."
            raise ConfigurationError(msg)
        self._names[name] = compiled

    def url_for(self, name: str, *args: Any) -> str:
        """Build the path for route *name*, substituting *args* in order.

        Raises ``RouteNotFoundError`` for unknown names and
        ``URLBuildError`` when the argument count doesn't fit.
        """
        try:
            compiled = self._names[name]
        except KeyError:
            raise RouteNotFoundError(name) from None
        return build_path(compiled, args, name=name)


def build_path(compiled: CompiledPath, args: tuple[Any, ...], *, name: str = "") -> str:
    """Substitute positional *args* into a compiled template."""
    placeholders = [seg for seg in compiled.segments if isinstance(seg, Placeholder)]
    required = sum(1 for p in placeholders if not p.optional)
    label = name or compiled.template

    if len(args) > len(placeholders):
        msg = (
            f"Route {label!r} takes at most {len(placeholders)} argument(s), "
            f"got {len(args)}."
        )
        raise URLBuildError(msg)
    if len(args) < required:
        msg = f"Route {label!r} needs at least {required} argument(s), got {len(args)}."
        raise URLBuildError(msg)

    remaining = list(args)
    parts: list[str] = []
    for seg in compiled.segments:
        if isinstance(seg, str):
            parts.append(seg)
            continue
        if not remaining:
            if seg.optional:
                continue
            msg = f"Route {label!r} has no argument left for {{{seg.name}}}."
            raise URLBuildError(msg)
        value = str(remaining.pop(0))
        safe = "/" if seg.type == "all" else ""
        parts.append(f"{seg.separator}{quote(value, safe=safe)}")

    return "".join(parts) or "/"
