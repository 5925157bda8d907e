"""Immutable HTTP request.

Frozen metadata with async body access. The multiplexer hands handlers a
copy carrying the path parameters it captured.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Any

from muxstack._internal.asgi import Receive, Scope
from muxstack.http.headers import Headers
from muxstack.http.query import QueryParams


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Body is read through ``body()``, ``text()``, ``json()`` or ``stream()``.
    The ASGI receive channel is consumed once; the bytes are cached and the
    cache is shared with every copy made by ``with_path_params``.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    path_params: dict[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    _receive: Receive = field(default=_no_body, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    def path_param(self, name: str, default: str | None = None) -> str | None:
        """Value captured by the ``{name}`` segment of the matched pattern."""
        return self.path_params.get(name, default)

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy carrying *path_params*; the body cache is shared."""
        return replace(self, path_params=dict(path_params))

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield body chunks straight from the ASGI receive channel."""
        if "body" in self._cache:
            yield self._cache["body"]
            return
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full body. Cached after the first call."""
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI ``http`` scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
