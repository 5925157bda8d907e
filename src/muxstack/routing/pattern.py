"""Registration key parsing.

A key is ``"<METHOD> <PATH>"`` (one space) or a bare ``"<PATH>"`` that
matches every method::

    "GET /users"             -> method "GET", segments [users]
    "GET /users/{id:int}"    -> method "GET", segments [users, {id:int}]
    "/files/{rest:path}"     -> any method, catch-all on the last segment
"""

import re
from dataclasses import dataclass

from muxstack.errors import MalformedPattern
from muxstack.routing.params import CATCH_ALL, CONVERTERS

# RFC 9110 token characters
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a pattern path.

    Static:   ``users``     (is_param=False)
    Param:    ``{id}``      (param_name="id", param_type="str")
    Typed:    ``{id:int}``  (param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"

    @property
    def is_catch_all(self) -> bool:
        return self.is_param and self.param_type == CATCH_ALL


@dataclass(frozen=True, slots=True)
class Pattern:
    """A parsed registration key."""

    key: str
    method: str | None
    path: str
    segments: tuple[PathSegment, ...]

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.param_name is not None)


def parse_pattern(key: str) -> Pattern:
    """Parse a registration key, raising ``MalformedPattern`` on bad syntax."""
    if not key:
        raise MalformedPattern(key, "empty pattern")
    if key != key.strip():
        raise MalformedPattern(key, "leading or trailing whitespace")

    method: str | None = None
    path = key
    if " " in key:
        method, path = key.split(" ", 1)
        if not _METHOD_RE.fullmatch(method):
            raise MalformedPattern(key, f"bad method {method!r}")
    if not path:
        raise MalformedPattern(key, "missing path")
    if any(ch.isspace() for ch in path):
        raise MalformedPattern(key, "whitespace in path")
    if not path.startswith("/"):
        raise MalformedPattern(key, "path must start with '/'")

    return Pattern(key=key, method=method, path=path, segments=tuple(parse_path(path, key)))


def parse_path(path: str, key: str | None = None) -> list[PathSegment]:
    """Parse a pattern path into segments.

    Empty segments are dropped, so a trailing slash doesn't matter.
    """
    key = key if key is not None else path
    segments: list[PathSegment] = []
    seen: set[str] = set()
    parts = [part for part in path.strip("/").split("/") if part]

    for index, part in enumerate(parts):
        if part.startswith("<") and part.endswith(">"):
            raise MalformedPattern(key, f"use {{param}}, not <param> (got {part!r})")

        if not (part.startswith("{") and part.endswith("}")):
            if "{" in part or "}" in part:
                raise MalformedPattern(key, f"wildcard must be a whole segment (got {part!r})")
            segments.append(PathSegment(value=part))
            continue

        inner = part[1:-1]
        name, _, param_type = inner.partition(":")
        param_type = param_type or "str"
        if not _NAME_RE.fullmatch(name):
            raise MalformedPattern(key, f"bad parameter name {name!r}")
        if param_type not in CONVERTERS:
            raise MalformedPattern(key, f"unknown converter {param_type!r}")
        if name in seen:
            raise MalformedPattern(key, f"duplicate parameter {name!r}")
        if param_type == CATCH_ALL and index != len(parts) - 1:
            raise MalformedPattern(key, f"{{{inner}}} must be the final segment")
        seen.add(name)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=name, param_type=param_type)
        )

    return segments
