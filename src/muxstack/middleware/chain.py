"""Middleware composition.

``compose`` turns an enrolled stack, registration-local middleware and a
terminal handler into one handler. It runs once per registration; the
result is what the multiplexer stores.
"""

from collections.abc import Iterable
from typing import Any

import anyio.from_thread

from muxstack._internal.invoke import as_async, in_worker_thread, is_async_callable
from muxstack._internal.types import AsyncHandler, Handler, Middleware
from muxstack.errors import ConfigurationError


class _Next:
    """The ``next`` handed to a middleware.

    Called from the event loop it returns the inner handler's coroutine, so
    ``await next(request, writer)`` works. Called from a ``def`` layer
    running in a worker thread it blocks until the inner handler finishes.
    """

    __slots__ = ("handler",)

    def __init__(self, handler: AsyncHandler) -> None:
        self.handler = handler

    def __call__(self, request: Any, writer: Any) -> Any:
        if in_worker_thread():
            return anyio.from_thread.run(self.handler, request, writer)
        return self.handler(request, writer)


def compose(
    stack: Iterable[Middleware],
    local: Iterable[Middleware],
    handler: Handler,
    *,
    threaded: bool = True,
) -> AsyncHandler:
    """Wrap *handler* so that ``stack[0]`` is outermost and ``local[-1]`` innermost.

    Equivalent to ``s1(s2(...sn(l1(...lm(handler)))))``. Both inputs are
    copied first, so mutating them afterwards has no effect on the result.
    With no middleware at all the (async-normalized) handler comes back as is.

    A middleware may return a plain ``def`` handler only when *threaded* is
    true: it then runs in a worker thread and its ``next`` blocks, so work
    after ``next`` still happens after the inner handler. Without threads a
    ``def`` layer could not wait for ``next``, and ``ConfigurationError`` is
    raised.
    """
    chain = [*stack, *local]
    wrapped = as_async(handler, threaded=threaded)
    for middleware in reversed(chain):
        next_ = _Next(wrapped)
        layer = middleware(next_)
        if layer is next_:
            continue
        if not threaded and not is_async_callable(layer):
            msg = (
                f"middleware {middleware!r} returned a plain def handler; "
                "use async def or enable threaded_sync_handlers"
            )
            raise ConfigurationError(msg)
        wrapped = as_async(layer, threaded=threaded)
    return wrapped
