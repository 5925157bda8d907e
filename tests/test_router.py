"""Tests for muxstack.router — middleware stacks, groups and dispatch."""

import pytest

from muxstack.config import RouterConfig
from muxstack.errors import DuplicatePattern, MalformedPattern
from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter
from muxstack.router import Router
from muxstack.testing import TestClient


def tracing(name: str, log: list[str]):
    def middleware(next):
        async def handler(request: Request, writer: ResponseWriter) -> None:
            log.append(f"{name}-pre")
            await next(request, writer)
            log.append(f"{name}-post")

        return handler

    return middleware


def prefix(text: str):
    def middleware(next):
        async def handler(request: Request, writer: ResponseWriter) -> None:
            writer.write(text)
            await next(request, writer)

        return handler

    return middleware


def suffix(text: str):
    def middleware(next):
        async def handler(request: Request, writer: ResponseWriter) -> None:
            await next(request, writer)
            writer.write(text)

        return handler

    return middleware


def text_handler(body: str, log: list[str] | None = None):
    async def handler(request: Request, writer: ResponseWriter) -> None:
        if log is not None:
            log.append(body)
        writer.write(body)

    return handler


class TestScenarios:
    async def test_hello(self) -> None:
        router = Router()

        async def hello(request: Request, writer: ResponseWriter) -> None:
            writer.write_header(200)
            writer.write("hi")

        router.get("/hello", hello)

        async with TestClient(router) as client:
            ok = await client.get("/hello")
            assert ok.status == 200
            assert ok.text == "hi"

            wrong = await client.post("/hello")
            assert wrong.status == 405
            assert wrong.header("allow") == "GET, HEAD"

    async def test_prefix_and_suffix_middleware(self) -> None:
        router = Router()
        router.use(prefix("[A]"))
        router.use(suffix("[B]"))
        router.get("/m", text_handler("core"))

        async with TestClient(router) as client:
            response = await client.get("/m")
        assert response.text == "[A]core[B]"

    async def test_use_between_registrations(self) -> None:
        router = Router()
        router.use(prefix("A"))
        router.get("/r1", text_handler("H1"))
        router.use(prefix("B"))
        router.get("/r2", text_handler("H2"))

        async with TestClient(router) as client:
            assert (await client.get("/r1")).text == "AH1"
            assert (await client.get("/r2")).text == "ABH2"

    async def test_group_middleware_stays_in_group(self) -> None:
        router = Router()
        router.use(prefix("A"))

        def body(g: Router) -> None:
            g.use(prefix("B"))
            g.get("/g1", text_handler("H1"))

        router.group(body)
        router.get("/top", text_handler("H2"))

        async with TestClient(router) as client:
            assert (await client.get("/g1")).text == "ABH1"
            assert (await client.get("/top")).text == "AH2"

    async def test_sibling_groups(self) -> None:
        router = Router()

        @router.group
        def first(g: Router) -> None:
            g.use(prefix("X"))
            g.get("/one", text_handler("1"))

        @router.group
        def second(g: Router) -> None:
            g.use(prefix("Y"))
            g.get("/two", text_handler("2"))

        async with TestClient(router) as client:
            assert (await client.get("/one")).text == "X1"
            assert (await client.get("/two")).text == "Y2"

    def test_duplicate_registration(self) -> None:
        router = Router()
        router.get("/dup", text_handler("a"))

        with pytest.raises(DuplicatePattern) as exc_info:
            router.get("/dup", text_handler("b"))
        assert exc_info.value.pattern == "GET /dup"
        assert exc_info.value.existing == "GET /dup"

    async def test_custom_method(self) -> None:
        router = Router()
        router.custom("LINK", "/l", text_handler("linked"))

        async with TestClient(router) as client:
            linked = await client.request("LINK", "/l")
            assert linked.status == 200
            assert linked.text == "linked"

            other = await client.get("/l")
            assert other.status == 405
            assert other.header("allow") == "LINK"


class TestMiddlewareOrder:
    async def test_enrolled_order(self) -> None:
        log: list[str] = []
        router = Router()
        router.use(tracing("A", log), tracing("B", log))
        router.get("/", text_handler("H", log))

        async with TestClient(router) as client:
            await client.get("/")
        assert log == ["A-pre", "B-pre", "H", "B-post", "A-post"]

    async def test_constructor_middleware_is_outermost(self) -> None:
        log: list[str] = []
        router = Router(tracing("A", log))
        router.use(tracing("B", log))
        router.get("/", text_handler("H", log))

        async with TestClient(router) as client:
            await client.get("/")
        assert log == ["A-pre", "B-pre", "H", "B-post", "A-post"]

    async def test_def_middleware_wraps_handler(self) -> None:
        log: list[str] = []

        def sync_tracing(next):
            def handler(request: Request, writer: ResponseWriter) -> None:
                log.append("A-pre")
                next(request, writer)
                log.append("A-post")

            return handler

        router = Router(sync_tracing)
        router.get("/", text_handler("H", log))

        async with TestClient(router) as client:
            response = await client.get("/")
        assert response.text == "H"
        assert log == ["A-pre", "H", "A-post"]

    async def test_local_runs_inside_enrolled(self) -> None:
        log: list[str] = []
        router = Router()
        router.use(tracing("A", log))
        router.get("/", text_handler("H", log), tracing("B", log))

        async with TestClient(router) as client:
            await client.get("/")
        assert log == ["A-pre", "B-pre", "H", "B-post", "A-post"]

    async def test_local_middleware_only_on_its_route(self) -> None:
        log: list[str] = []
        router = Router()
        router.get("/a", text_handler("Ha", log), tracing("L", log))
        router.get("/b", text_handler("Hb", log))

        async with TestClient(router) as client:
            await client.get("/b")
        assert log == ["Hb"]

    async def test_use_after_registration_does_not_apply(self) -> None:
        log: list[str] = []
        router = Router()
        router.get("/early", text_handler("H", log))
        router.use(tracing("X", log))

        async with TestClient(router) as client:
            await client.get("/early")
        assert log == ["H"]

    async def test_no_middleware(self) -> None:
        router = Router()
        router.get("/bare", text_handler("bare"))

        async with TestClient(router) as client:
            response = await client.get("/bare")
        assert response.status == 200
        assert response.text == "bare"

    async def test_short_circuit(self) -> None:
        log: list[str] = []

        def deny(next):
            async def handler(request: Request, writer: ResponseWriter) -> None:
                writer.write_header(403)
                writer.write("nope")

            return handler

        router = Router()
        router.use(tracing("A", log), deny)
        router.get("/secret", text_handler("H", log))

        async with TestClient(router) as client:
            response = await client.get("/secret")
        assert response.status == 403
        assert response.text == "nope"
        assert log == ["A-pre", "A-post"]

    def test_middleware_called_once_per_registration(self) -> None:
        calls: list[str] = []

        def counting(next):
            calls.append("wrapped")
            return next

        router = Router(counting)
        router.get("/a", text_handler("a"))
        router.get("/b", text_handler("b"))
        assert calls == ["wrapped", "wrapped"]


class TestGroups:
    async def test_group_does_not_touch_parent_stack(self) -> None:
        router = Router()
        router.use(prefix("A"))
        router.group(lambda g: g.use(prefix("B")))
        assert len(router.middleware) == 1

    async def test_nested_groups_inherit(self) -> None:
        router = Router()
        router.use(prefix("A"))

        @router.group
        def outer(g: Router) -> None:
            g.use(prefix("B"))

            @g.group
            def inner(gg: Router) -> None:
                gg.use(prefix("C"))
                gg.get("/deep", text_handler("H"))

            g.get("/mid", text_handler("H"))

        async with TestClient(router) as client:
            assert (await client.get("/deep")).text == "ABCH"
            assert (await client.get("/mid")).text == "ABH"

    async def test_parent_routes_registered_before_group(self) -> None:
        router = Router()
        router.get("/before", text_handler("H"))
        router.group(lambda g: g.use(prefix("G")))
        router.get("/after", text_handler("H"))

        async with TestClient(router) as client:
            assert (await client.get("/before")).text == "H"
            assert (await client.get("/after")).text == "H"

    def test_groups_share_the_multiplexer(self) -> None:
        router = Router()
        seen: list[Router] = []
        router.group(seen.append)
        assert seen[0].mux is router.mux
        assert seen[0] is not router

    async def test_group_routes_reachable_from_parent(self) -> None:
        router = Router()
        router.group(lambda g: g.get("/inside", text_handler("in")))

        assert router.patterns == ("GET /inside",)
        writer = ResponseWriter()
        await router.serve(Request(method="GET", path="/inside"), writer)
        assert writer.body == b"in"

    def test_group_child_keeps_subclass(self) -> None:
        class AppRouter(Router):
            __slots__ = ()

        router = AppRouter()
        seen: list[Router] = []
        router.group(seen.append)
        assert type(seen[0]) is AppRouter

    def test_group_returns_body(self) -> None:
        router = Router()

        def body(g: Router) -> None:
            pass

        assert router.group(body) is body

    def test_duplicate_across_groups(self) -> None:
        router = Router()
        router.get("/x", text_handler("a"))

        with pytest.raises(DuplicatePattern):
            router.group(lambda g: g.get("/x", text_handler("b")))


class TestRegistration:
    @pytest.mark.parametrize(
        ("method", "register"),
        [
            ("GET", Router.get),
            ("POST", Router.post),
            ("PUT", Router.put),
            ("DELETE", Router.delete),
            ("PATCH", Router.patch),
            ("HEAD", Router.head),
            ("OPTIONS", Router.options),
        ],
    )
    def test_method_helpers(self, method: str, register) -> None:
        router = Router()
        register(router, "/thing", text_handler("x"))
        assert router.patterns == (f"{method} /thing",)

    async def test_route_decorator(self) -> None:
        router = Router()

        @router.route("PUT", "/items/{id:int}", suffix("!"))
        async def update(request: Request, writer: ResponseWriter) -> None:
            writer.write(f"updated {request.path_param('id')}")

        async with TestClient(router) as client:
            response = await client.put("/items/7")
        assert response.text == "updated 7!"
        assert update.__name__ == "update"

    def test_malformed_pattern_propagates(self) -> None:
        router = Router()
        with pytest.raises(MalformedPattern):
            router.custom("", "/x", text_handler("x"))
        with pytest.raises(MalformedPattern):
            router.get("no-slash", text_handler("x"))

    async def test_method_discrimination(self) -> None:
        router = Router()
        router.get("/x", text_handler("x"))

        async with TestClient(router) as client:
            response = await client.post("/x")
        assert response.status == 405

    async def test_unknown_path(self) -> None:
        router = Router()
        router.get("/x", text_handler("x"))

        async with TestClient(router) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.text == "404 page not found\n"

    async def test_sync_handler(self) -> None:
        router = Router(suffix("!"))

        def hello(request: Request, writer: ResponseWriter) -> None:
            writer.write("sync")

        router.get("/sync", hello)

        async with TestClient(router) as client:
            assert (await client.get("/sync")).text == "sync!"

    async def test_sync_handler_inline(self) -> None:
        router = Router(config=RouterConfig(threaded_sync_handlers=False))
        router.get("/sync", lambda request, writer: writer.write("inline"))

        async with TestClient(router) as client:
            assert (await client.get("/sync")).text == "inline"

    async def test_frozen_after_first_request(self) -> None:
        router = Router()
        router.get("/", text_handler("x"))

        async with TestClient(router) as client:
            await client.get("/")

        with pytest.raises(RuntimeError, match="frozen"):
            router.get("/late", text_handler("x"))

    async def test_lifespan_does_not_freeze(self) -> None:
        router = Router()

        async def receive() -> dict:
            return {"type": "lifespan.startup"}

        async def send(message: dict) -> None:
            pass

        await router({"type": "lifespan", "asgi": {"version": "3.0"}}, receive, send)
        router.get("/late", text_handler("late"))
        assert router.mux.frozen is False

        async with TestClient(router) as client:
            assert (await client.get("/late")).text == "late"
        assert router.mux.frozen is True

    def test_freeze_covers_groups(self) -> None:
        router = Router()
        router.freeze()

        with pytest.raises(RuntimeError, match="frozen"):
            router.group(lambda g: g.get("/late", text_handler("x")))

    async def test_handler_exception_propagates(self) -> None:
        router = Router()

        async def broken(request: Request, writer: ResponseWriter) -> None:
            raise ValueError("boom")

        router.get("/broken", broken)

        async with TestClient(router) as client:
            with pytest.raises(ValueError, match="boom"):
                await client.get("/broken")

    def test_config_shared_with_groups(self) -> None:
        config = RouterConfig(not_found_body="missing")
        router = Router(config=config)
        seen: list[Router] = []
        router.group(seen.append)
        assert seen[0].config is config
