"""Muxstack — a method- and path-aware ASGI router with composable middleware.

Basic usage::

    from muxstack import Router

    def logged(next):
        async def handler(request, writer):
            print(request.method, request.path)
            await next(request, writer)

        return handler

    router = Router(logged)

    async def hello(request, writer):
        writer.write("hi")

    router.get("/hello", hello)

    # any ASGI server: uvicorn myapp:router
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DuplicatePattern",
    "HTTPError",
    "MalformedPattern",
    "MethodNotAllowed",
    "Middleware",
    "MuxstackError",
    "Next",
    "NotFound",
    "Request",
    "ResponseWriter",
    "Router",
    "RouterConfig",
    "ServeMux",
    "compose",
    "error",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import muxstack`` fast while providing a flat top-level API.
    """
    if name == "Router":
        from muxstack.router import Router

        return Router

    if name == "RouterConfig":
        from muxstack.config import RouterConfig

        return RouterConfig

    if name == "ServeMux":
        from muxstack.routing.mux import ServeMux

        return ServeMux

    if name in ("Request", "ResponseWriter", "error"):
        from muxstack import http as _http

        return getattr(_http, name)

    if name in ("Middleware", "Next", "compose"):
        from muxstack import middleware as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "DuplicatePattern",
        "HTTPError",
        "MalformedPattern",
        "MethodNotAllowed",
        "MuxstackError",
        "NotFound",
    ):
        from muxstack import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
