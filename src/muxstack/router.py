"""Router — middleware stacks and scoped groups over one shared multiplexer.

Every registration snapshots the router's enrolled middleware, composes it
with the route's own middleware, and stores the result in the multiplexer
under ``"<METHOD> <PATH>"``::

    router = Router(request_id)
    router.use(access_log)

    @router.group
    def api(r: Router) -> None:
        r.use(require_token)
        r.get("/api/users", list_users)
        r.post("/api/users", create_user, validate_json)

    router.get("/health", health)  # request_id, access_log only

``Router`` is itself an ASGI application.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from muxstack._internal.asgi import Receive, Scope, Send
from muxstack._internal.types import Handler, Middleware
from muxstack.config import RouterConfig
from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter
from muxstack.middleware.chain import compose
from muxstack.routing.mux import ServeMux
from muxstack.server.handler import handle_request

logger = logging.getLogger("muxstack.router")

GroupBody = TypeVar("GroupBody", bound=Callable[["Router"], object])
H = TypeVar("H", bound=Callable[..., object])


class Router:
    """HTTP router with an enrolled middleware stack.

    Configuration (``use``, ``group``, registrations) is single-threaded and
    must finish before requests are served. The first ASGI ``http`` call
    freezes the shared multiplexer; registering afterwards raises ``RuntimeError``.

    Middleware enrolled with ``use`` applies only to routes registered
    after it. Routes registered earlier keep the stack they were composed
    with.
    """

    __slots__ = ("_middleware", "_mux")

    def __init__(self, *middleware: Middleware, config: RouterConfig | None = None) -> None:
        self._mux = ServeMux(config)
        self._middleware: list[Middleware] = list(middleware)

    @classmethod
    def _derive(cls, mux: ServeMux, middleware: list[Middleware]) -> "Router":
        """Build a router over an existing multiplexer."""
        child = cls.__new__(cls)
        child._mux = mux
        child._middleware = middleware
        return child

    # -- Introspection --

    @property
    def mux(self) -> ServeMux:
        """The multiplexer shared with every group derived from this router."""
        return self._mux

    @property
    def config(self) -> RouterConfig:
        return self._mux.config

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        """Snapshot of the enrolled stack."""
        return tuple(self._middleware)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._mux.patterns

    # -- Configuration --

    def use(self, *middleware: Middleware) -> None:
        """Append to the enrolled stack for subsequent registrations."""
        self._middleware.extend(middleware)

    def group(self, body: GroupBody) -> GroupBody:
        """Call *body* with a child router sharing this router's multiplexer.

        The child starts from a copy of the enrolled stack, so anything it
        ``use``s stays out of this router and out of sibling groups. Don't
        keep the child around after *body* returns.

        Returns *body*, so it works as a decorator.
        """
        child = type(self)._derive(self._mux, list(self._middleware))
        logger.debug("group %s opened with %d middleware", _name(body), len(child._middleware))
        body(child)
        return body

    def handle(self, method: str, path: str, handler: Handler, *middleware: Middleware) -> None:
        """Register *handler* for ``method`` and ``path``.

        Errors from the multiplexer (``MalformedPattern``,
        ``DuplicatePattern``) propagate unchanged.
        """
        composed = compose(
            self._middleware,
            middleware,
            handler,
            threaded=self.config.threaded_sync_handlers,
        )
        self._mux.register(f"{method} {path}", composed)
        logger.debug(
            "%s %s -> %s (%d middleware)",
            method,
            path,
            _name(handler),
            len(self._middleware) + len(middleware),
        )

    def route(self, method: str, path: str, *middleware: Middleware) -> Callable[[H], H]:
        """Decorator form of ``handle``::

        @router.route("GET", "/users/{id:int}")
        async def show_user(request, writer): ...
        """

        def decorator(handler: H) -> H:
            self.handle(method, path, handler, *middleware)
            return handler

        return decorator

    def get(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("GET", path, handler, *middleware)

    def post(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("POST", path, handler, *middleware)

    def put(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("PUT", path, handler, *middleware)

    def delete(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("DELETE", path, handler, *middleware)

    def patch(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("PATCH", path, handler, *middleware)

    def head(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("HEAD", path, handler, *middleware)

    def options(self, path: str, handler: Handler, *middleware: Middleware) -> None:
        self.handle("OPTIONS", path, handler, *middleware)

    def custom(self, method: str, path: str, handler: Handler, *middleware: Middleware) -> None:
        """Register under an arbitrary method token, e.g. ``LINK``."""
        self.handle(method, path, handler, *middleware)

    def freeze(self) -> None:
        """End the configuration phase for this router and all its groups."""
        if not self._mux.frozen:
            logger.debug("freezing with %d patterns", len(self._mux.patterns))
            self._mux.freeze()

    # -- Serving --

    async def serve(self, request: Request, writer: ResponseWriter) -> None:
        """Dispatch through the shared multiplexer."""
        await self._mux.serve(request, writer)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Only ``http`` scopes end the configuration phase, so a lifespan
        startup can still register routes.
        """
        if scope["type"] == "http":
            self.freeze()
        await handle_request(scope, receive, send, mux=self._mux)


def _name(obj: object) -> str:
    return getattr(obj, "__qualname__", None) or type(obj).__name__
