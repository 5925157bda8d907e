"""Middleware protocol.

A middleware takes the next handler and returns a handler::

    def timing(next: Next) -> Handler:
        async def handler(request: Request, writer: ResponseWriter) -> None:
            start = time.monotonic()
            await next(request, writer)
            writer.headers.set("X-Time", f"{time.monotonic() - start:.3f}")

        return handler

It is called once, when a route is registered, not per request. The
returned handler may skip ``next`` entirely to short-circuit the request.

A ``def`` handler works too when sync handlers are threaded (the default).
It runs in a worker thread and its ``next`` blocks until the inner handler
returns::

    def audit(next: Next) -> Handler:
        def handler(request: Request, writer: ResponseWriter) -> None:
            record("start", request.path)
            next(request, writer)
            record("done", writer.status)

        return handler

No base class required; callable objects work too::

    class RequireHeader:
        def __init__(self, name: str) -> None:
            self.name = name

        def __call__(self, next: Next) -> Handler:
            async def handler(request, writer):
                if self.name not in request.headers:
                    error(writer, "missing header", 400)
                    return
                await next(request, writer)

            return handler
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter

# The handler a middleware wraps; awaitable on the event loop, blocking in a
# worker thread
Next: TypeAlias = Callable[[Request, ResponseWriter], Awaitable[None]]

# What a middleware may return; a ``def`` handler runs in a worker thread
# where ``next`` blocks, so it needs ``threaded_sync_handlers``
Handler: TypeAlias = Callable[[Request, ResponseWriter], Awaitable[None] | None]


class Middleware(Protocol):
    """Protocol for muxstack middleware."""

    def __call__(self, next: Next, /) -> Handler: ...
