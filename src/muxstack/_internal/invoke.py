"""Invoke helpers — call sync or async handlers uniformly.

Handlers and the callables produced by middleware can be ``def`` or
``async def``. Everything downstream of registration awaits them, so the
sync/async check lives here and nowhere else.

Usage::

    from muxstack._internal.invoke import as_async

    handler = as_async(user_handler)
    await handler(request, writer)
"""

import functools
import inspect
import threading
from typing import Any

import anyio.to_thread

# Set while a handler runs in a worker thread started by ``as_async``
_worker = threading.local()


def in_worker_thread() -> bool:
    """True inside a sync handler that ``as_async`` moved to a worker thread."""
    return getattr(_worker, "active", False)


def _run_marked(handler: Any, *args: Any) -> Any:
    previous = in_worker_thread()
    _worker.active = True
    try:
        return handler(*args)
    finally:
        _worker.active = previous


def is_async_callable(obj: Any) -> bool:
    """True if calling *obj* returns an awaitable by construction.

    Sees through ``functools.partial`` and callable instances with an
    ``async def __call__``.
    """
    while isinstance(obj, functools.partial):
        obj = obj.func
    if inspect.iscoroutinefunction(obj):
        return True
    call = getattr(obj, "__call__", None)  # noqa: B004
    return inspect.iscoroutinefunction(call)


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def as_async(handler: Any, *, threaded: bool = True) -> Any:
    """Return an ``async def`` equivalent of *handler*.

    Async callables are returned unchanged. Plain callables are wrapped:
    with ``threaded=True`` they run in a worker thread via
    ``anyio.to_thread.run_sync``, otherwise inline on the event loop.
    Either way an awaitable they hand back is awaited.
    """
    if is_async_callable(handler):
        return handler

    if threaded:

        @functools.wraps(handler)
        async def run_in_thread(*args: Any) -> Any:
            result = await anyio.to_thread.run_sync(functools.partial(_run_marked, handler, *args))
            if inspect.isawaitable(result):
                result = await result
            return result

        return run_in_thread

    @functools.wraps(handler)
    async def run_inline(*args: Any) -> Any:
        return await invoke(handler, *args)

    return run_inline
