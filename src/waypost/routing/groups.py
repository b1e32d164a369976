"""Route group stack.

A group is a scoped accumulation of path prefix, middleware, name prefix,
and handler namespace. Frames are pushed when a group is entered and
popped when it exits, including when the group body raises, so a failed
group never leaks its prefix into sibling routes.

Effective values concatenate every active frame, outermost first::

    with router.group("/admin", middleware=[auth], name="admin."):
        with router.group("/posts", name="posts."):
            router.get("", index, name="index")
    # -> path "/admin/posts", middleware [auth], name "admin.posts.index"
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class GroupFrame:
    """One active group."""

    prefix: str = ""
    middleware: tuple[Callable[..., Any], ...] = ()
    name_prefix: str = ""
    namespace: str = ""


class GroupStack:
    """The stack of currently active group frames.

    Only touched during the single-threaded registration phase.
    """

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[GroupFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    @contextmanager
    def push(self, frame: GroupFrame) -> Iterator[GroupFrame]:
        """Activate *frame* for the duration of the ``with`` block."""
        self._frames.append(frame)
        depth = len(self._frames)
        try:
            yield frame
        finally:
            # Pop exactly the frame pushed here, even if a nested group
            # was left half-open by an exception.
            del self._frames[depth - 1 :]

    @property
    def prefix(self) -> str:
        return "".join(frame.prefix for frame in self._frames)

    @property
    def middleware(self) -> tuple[Callable[..., Any], ...]:
        return tuple(mw for frame in self._frames for mw in frame.middleware)

    @property
    def name_prefix(self) -> str:
        return "".join(frame.name_prefix for frame in self._frames)

    @property
    def namespace(self) -> str:
        return "".join(frame.namespace for frame in self._frames)
