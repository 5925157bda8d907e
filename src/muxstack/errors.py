"""Muxstack exception hierarchy.

Registration errors (``ConfigurationError`` and its subclasses) surface to
whoever is configuring the router. ``HTTPError`` subclasses are raised by
the multiplexer while matching and turned into responses before they leave
``ServeMux.serve``.
"""

from dataclasses import dataclass


class MuxstackError(Exception):
    """Base for all muxstack-specific errors."""


class ConfigurationError(MuxstackError):
    """Raised when a router or multiplexer is configured incorrectly."""


class MalformedPattern(ConfigurationError):
    """A registration key the multiplexer cannot parse.

    Covers empty methods, paths that don't start with ``/``, unknown
    converters and misplaced catch-all segments.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid pattern {pattern!r}: {reason}")


class DuplicatePattern(ConfigurationError):
    """The same ``(method, path)`` key was registered twice."""

    def __init__(self, pattern: str, existing: str) -> None:
        self.pattern = pattern
        self.existing = existing
        super().__init__(f"pattern {pattern!r} conflicts with already registered {existing!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(MuxstackError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no pattern matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — a pattern matched the path but not the method.

    Carries an ``Allow`` header listing the methods registered for the path.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )

    @property
    def allowed(self) -> tuple[str, ...]:
        """Allowed methods parsed back out of the ``Allow`` header."""
        for name, value in self.headers:
            if name == "Allow":
                return tuple(value.split(", ")) if value else ()
        return ()
