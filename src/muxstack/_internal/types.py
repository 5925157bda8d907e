"""Shared type aliases used across muxstack modules."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from muxstack.http.request import Request
    from muxstack.http.writer import ResponseWriter

# A request handler; ``def`` or ``async def``
Handler: TypeAlias = "Callable[[Request, ResponseWriter], Awaitable[None] | None]"

# A handler as stored in the multiplexer, always awaitable
AsyncHandler: TypeAlias = "Callable[[Request, ResponseWriter], Awaitable[None]]"

# Transforms a handler into a handler
Middleware: TypeAlias = "Callable[[AsyncHandler], Handler]"
