"""Invoke helpers — call sync or async handlers uniformly.

Waypost handlers and middleware can be ``def`` or ``async def``. Any code
that calls a user-provided callable must handle both cases. This module
provides a single helper so the sync/async check lives in exactly one
place.

Usage::

    from waypost._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def show(id: str):
            return f"post {id}"

        # async: coroutine is awaited
        async def show(id: str):
            post = await load_post(id)
            return post.title

    A sync middleware that returns ``next(request)`` hands back a
    coroutine, which is awaited here as well.
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
