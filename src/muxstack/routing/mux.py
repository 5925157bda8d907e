"""Pattern multiplexer with trie-based path matching.

Keys are registered during the configuration phase; after ``freeze()`` the
trie is only ever read, so concurrent requests can share it without locks.

Paths are matched as the server hands them over in the ASGI ``path``, which
is already percent-decoded: an encoded ``%2F`` splits a segment like a plain
``/`` does, so only a ``{name:path}`` parameter can capture it. ``.`` and
``..`` segments are matched literally; nothing cleans the path first.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from muxstack._internal.invoke import as_async
from muxstack._internal.types import AsyncHandler, Handler
from muxstack.config import RouterConfig
from muxstack.errors import DuplicatePattern, MethodNotAllowed, NotFound
from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter, error
from muxstack.routing.params import CONVERTERS, convert_param
from muxstack.routing.pattern import Pattern, parse_pattern

logger = logging.getLogger("muxstack.routing")

# Parameter edges are tried narrowest converter first
_PARAM_ORDER = ("int", "float", "str")


@dataclass(frozen=True, slots=True)
class _Entry:
    pattern: Pattern
    handler: AsyncHandler


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful match."""

    pattern: Pattern
    handler: AsyncHandler
    path_params: dict[str, str]

    @property
    def typed_params(self) -> dict[str, str | int | float]:
        """Path parameters converted by their segment converters."""
        types = {
            seg.param_name: seg.param_type for seg in self.pattern.segments if seg.param_name
        }
        return {name: convert_param(value, types[name]) for name, value in self.path_params.items()}


class _TrieNode:
    """A node in the pattern trie. Mutable until the mux is frozen."""

    __slots__ = ("catch_all", "children", "entries", "params")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by converter; names live on the entries
        self.params: dict[str, tuple[re.Pattern[str], _TrieNode]] = {}
        # Node reached by a trailing {name:path} segment
        self.catch_all: _TrieNode | None = None
        # Entries at this node keyed by method, None for method-less patterns
        self.entries: dict[str | None, _Entry] = {}

    def resolve(self, method: str) -> _Entry | None:
        if method in self.entries:
            return self.entries[method]
        if method == "HEAD" and "GET" in self.entries:
            return self.entries["GET"]
        return self.entries.get(None)

    def allowed(self) -> set[str]:
        methods = {m for m in self.entries if m is not None}
        if "GET" in methods:
            methods.add("HEAD")
        return methods


class ServeMux:
    """Dispatch table keyed by ``"<METHOD> <PATH>"`` patterns.

    Usage::

        mux = ServeMux()
        mux.register("GET /users/{id:int}", show_user)
        match = mux.match("GET", "/users/42")
        await mux.serve(request, writer)

    Static segments win over parameters, parameters over a catch-all.
    ``HEAD`` falls back to a ``GET`` entry; a method-less pattern accepts
    any method not registered explicitly on the same path.
    """

    __slots__ = ("_frozen", "_keys", "_root", "config")

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config = config or RouterConfig()
        self._root = _TrieNode()
        self._keys: list[str] = []
        self._frozen = False

    @property
    def patterns(self) -> tuple[str, ...]:
        """Registered keys in registration order."""
        return tuple(self._keys)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the configuration phase. No more patterns can be registered."""
        self._frozen = True

    def register(self, key: str, handler: Handler) -> None:
        """Insert *handler* under *key*.

        Raises ``MalformedPattern`` for bad syntax and ``DuplicatePattern``
        when the method and path shape are already taken.
        """
        if self._frozen:
            msg = "Cannot modify routes after the router is frozen."
            raise RuntimeError(msg)

        pattern = parse_pattern(key)
        node = self._root
        for seg in pattern.segments:
            if seg.is_catch_all:
                if node.catch_all is None:
                    node.catch_all = _TrieNode()
                node = node.catch_all
            elif seg.is_param:
                if seg.param_type not in node.params:
                    regex, _ = CONVERTERS[seg.param_type]
                    node.params[seg.param_type] = (re.compile(regex), _TrieNode())
                node = node.params[seg.param_type][1]
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        existing = node.entries.get(pattern.method)
        if existing is not None:
            raise DuplicatePattern(key, existing.pattern.key)

        node.entries[pattern.method] = _Entry(
            pattern=pattern,
            handler=as_async(handler, threaded=self.config.threaded_sync_handlers),
        )
        self._keys.append(key)
        logger.debug("registered %s", key)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path.

        Raises ``NotFound`` if no pattern matches the path and
        ``MethodNotAllowed`` if patterns match the path but not the method.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        allowed: set[str] = set()

        for node, values in self._walk(self._root, parts, 0, []):
            entry = node.resolve(method)
            if entry is not None:
                params = dict(zip(entry.pattern.param_names, values, strict=True))
                return RouteMatch(pattern=entry.pattern, handler=entry.handler, path_params=params)
            allowed |= node.allowed()

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No pattern matches {method} {path!r}")

    def _walk(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        values: list[str],
    ) -> Iterator[tuple[_TrieNode, list[str]]]:
        """Yield every node whose entries match *parts*, most specific first."""
        if index == len(parts):
            if node.entries:
                yield node, values
            return

        part = parts[index]

        child = node.children.get(part)
        if child is not None:
            yield from self._walk(child, parts, index + 1, values)

        for param_type in _PARAM_ORDER:
            if param_type not in node.params:
                continue
            regex, param_node = node.params[param_type]
            if regex.fullmatch(part):
                yield from self._walk(param_node, parts, index + 1, [*values, part])

        if node.catch_all is not None and node.catch_all.entries:
            yield node.catch_all, [*values, "/".join(parts[index:])]

    async def serve(self, request: Request, writer: ResponseWriter) -> None:
        """Dispatch *request* to its handler, or write a 404/405 reply."""
        try:
            match = self.match(request.method, request.path)
        except MethodNotAllowed as exc:
            logger.debug("method not allowed: %s %s", request.method, request.path)
            for name, value in exc.headers:
                writer.headers.set(name, value)
            error(writer, self.config.method_not_allowed_body, exc.status)
            return
        except NotFound as exc:
            logger.debug("not found: %s %s", request.method, request.path)
            error(writer, self.config.not_found_body, exc.status)
            return

        await match.handler(request.with_path_params(match.path_params), writer)
