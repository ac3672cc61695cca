"""Tests for bunwork.app — registration, dispatch, freezing, and lifespan."""

import logging
from typing import Any

import anyio
import pytest

from bunwork.app import BLOCKED_BODY, NOT_FOUND_BODY, Bunwork
from bunwork.blueprint import Blueprint
from bunwork.errors import RegistrationError
from bunwork.http.request import Request
from bunwork.http.response import Response


def _request(method: str, path: str) -> Request:
    return Request.from_url(method, f"http://localhost{path}")


class TestAppRegistration:
    def test_route_decorator(self) -> None:
        app = Bunwork()

        @app.route("/")
        def index(request):
            return Response("hello")

        assert len(app.routes) == 1
        assert app.routes[0].path == "/"
        assert app.routes[0].method == "GET"

    def test_route_with_methods(self) -> None:
        app = Bunwork()

        @app.route("/users", methods=["GET", "POST"])
        def users(request):
            return Response("users")

        assert sorted(r.method for r in app.routes) == ["GET", "POST"]

    def test_method_helpers_direct_call(self) -> None:
        app = Bunwork()

        def handler(request):
            return Response("ok")

        assert app.get("/a", handler) is handler
        app.post("/b", handler)
        app.put("/c", handler)
        app.patch("/d", handler)
        app.delete("/e", handler)

        methods = sorted((r.method, r.path) for r in app.routes)
        assert methods == [
            ("DELETE", "/e"),
            ("GET", "/a"),
            ("PATCH", "/d"),
            ("POST", "/b"),
            ("PUT", "/c"),
        ]

    def test_method_helper_decorator(self) -> None:
        app = Bunwork()

        @app.post("/items")
        def create(request):
            return Response("created", status=201)

        assert app.routes[0].handler is create

    def test_lowercase_method_normalized(self) -> None:
        app = Bunwork()
        app.add_route("post", "/items", lambda request: Response("ok"))

        assert app.routes[0].method == "POST"

    def test_rejects_empty_method(self) -> None:
        app = Bunwork()

        with pytest.raises(RegistrationError):
            app.add_route("", "/items", lambda request: Response("ok"))

    def test_rejects_bad_path(self) -> None:
        app = Bunwork()

        with pytest.raises(RegistrationError):
            app.get("items", lambda request: Response("ok"))

    def test_registration_error_is_value_error(self) -> None:
        app = Bunwork()

        with pytest.raises(ValueError):
            app.get("/a/:", lambda request: Response("ok"))

    def test_middleware_registration(self) -> None:
        app = Bunwork()

        def mw(request, next):
            next()

        assert app.middleware(mw) is mw
        assert list(app._middleware) == [mw]

    def test_middleware_must_be_callable(self) -> None:
        app = Bunwork()

        with pytest.raises(RegistrationError):
            app.middleware("nope")  # type: ignore[arg-type]

    def test_static_requires_prefix(self) -> None:
        app = Bunwork()

        with pytest.raises(RegistrationError):
            app.static("", ".")


class TestAppFreeze:
    async def test_registration_after_first_request(self) -> None:
        app = Bunwork()
        app.get("/", lambda request: Response("ok"))

        await app.handle(_request("GET", "/"))

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.get("/late", lambda request: Response("late"))

    async def test_middleware_after_first_request(self) -> None:
        app = Bunwork()
        await app.handle(_request("GET", "/"))

        with pytest.raises(RuntimeError):
            app.middleware(lambda request, next: next())

    async def test_blueprint_after_first_request(self) -> None:
        app = Bunwork()
        await app.handle(_request("GET", "/"))

        with pytest.raises(RuntimeError):
            app.register_blueprint(Blueprint("/users"))

    async def test_static_after_first_request(self) -> None:
        app = Bunwork()
        await app.handle(_request("GET", "/"))

        with pytest.raises(RuntimeError):
            app.static("/assets", ".")

    def test_ensure_frozen_idempotent(self) -> None:
        app = Bunwork()
        app._ensure_frozen()
        app._ensure_frozen()

        assert app._frozen is True


class TestAppHandle:
    async def test_param_route(self) -> None:
        app = Bunwork()

        @app.get("/hello/:name")
        def hello(request):
            return Response(f"Hello, {request.params['name']}!")

        response = await app.handle(_request("GET", "/hello/john"))
        assert response.status == 200
        assert response.text == "Hello, john!"

    async def test_missing_segment_is_not_found(self) -> None:
        app = Bunwork()
        app.get("/hello/:name", lambda request: Response("hi"))

        response = await app.handle(_request("GET", "/hello"))
        assert response.status == 404
        assert response.text == NOT_FOUND_BODY

    async def test_unknown_method_is_not_found(self) -> None:
        app = Bunwork()
        app.get("/items", lambda request: Response("items"))

        response = await app.handle(_request("DELETE", "/items"))
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_handler_response_passed_through(self) -> None:
        app = Bunwork()
        sentinel = Response("created", status=201).with_header("Location", "/items/1")
        app.post("/items", lambda request: sentinel)

        response = await app.handle(_request("POST", "/items"))
        assert response is sentinel

    async def test_non_response_return_passed_through(self) -> None:
        app = Bunwork()
        app.get("/data", lambda request: {"ok": True})

        assert await app.handle(_request("GET", "/data")) == {"ok": True}

    async def test_async_handler(self) -> None:
        app = Bunwork()

        @app.get("/users/:id")
        async def show(request):
            return Response.json({"id": request.params["id"]})

        response = await app.handle(_request("GET", "/users/42"))
        assert response.content_type == "application/json"
        assert response.text == '{"id": "42"}'

    async def test_handler_sees_query(self) -> None:
        app = Bunwork()

        @app.get("/search")
        def search(request):
            return Response(request.query.get("q", ""))

        response = await app.handle(_request("GET", "/search?q=bunwork"))
        assert response.text == "bunwork"

    async def test_handler_reads_body(self) -> None:
        app = Bunwork()

        @app.post("/echo")
        async def echo(request):
            return Response(await request.text())

        request = Request.from_url("POST", "http://localhost/echo", body=b"payload")
        response = await app.handle(request)
        assert response.text == "payload"

    async def test_literal_route_preferred(self) -> None:
        app = Bunwork()
        app.get("/users/:id", lambda request: Response("by id"))
        app.get("/users/me", lambda request: Response("me"))

        response = await app.handle(_request("GET", "/users/me"))
        assert response.text == "me"

    async def test_last_registration_wins(self) -> None:
        app = Bunwork()
        app.get("/", lambda request: Response("first"))
        app.get("/", lambda request: Response("second"))

        response = await app.handle(_request("GET", "/"))
        assert response.text == "second"

    async def test_handler_exception_propagates(self) -> None:
        app = Bunwork()

        @app.get("/boom")
        def boom(request):
            raise ValueError("kaboom")

        with pytest.raises(ValueError, match="kaboom"):
            await app.handle(_request("GET", "/boom"))

    async def test_handle_does_not_log(self, caplog: pytest.LogCaptureFixture) -> None:
        app = Bunwork()
        app.get("/", lambda request: Response("ok"))
        app._ensure_frozen()

        with caplog.at_level(logging.DEBUG, logger="bunwork"):
            await app.handle(_request("GET", "/"))

        assert caplog.records == []


class TestAppMiddleware:
    async def test_runs_in_order_before_handler(self) -> None:
        app = Bunwork()
        calls: list[str] = []

        @app.middleware
        def first(request, next):
            calls.append("first")
            next()

        @app.middleware
        async def second(request, next):
            calls.append("second")
            next()

        @app.get("/")
        def index(request):
            calls.append("handler")
            return Response("ok")

        await app.handle(_request("GET", "/"))
        assert calls == ["first", "second", "handler"]

    async def test_block_returns_403(self) -> None:
        app = Bunwork()
        calls: list[str] = []

        @app.middleware
        def gate(request, next):
            calls.append("gate")

        @app.middleware
        def after(request, next):
            calls.append("after")
            next()

        @app.get("/")
        def index(request):
            calls.append("handler")
            return Response("ok")

        response = await app.handle(_request("GET", "/"))
        assert response.status == 403
        assert response.text == BLOCKED_BODY
        assert calls == ["gate"]

    async def test_block_after_suspension_returns_403(self) -> None:
        app = Bunwork()
        calls: list[str] = []

        @app.middleware
        async def slow_gate(request, next):
            await anyio.sleep(0.01)
            calls.append("slow_gate")

        @app.get("/")
        def index(request):
            calls.append("handler")
            return Response("ok")

        response = await app.handle(_request("GET", "/"))
        assert response.status == 403
        assert response.text == BLOCKED_BODY
        assert calls == ["slow_gate"]

    async def test_next_after_suspension_continues(self) -> None:
        app = Bunwork()
        calls: list[str] = []

        @app.middleware
        async def slow_pass(request, next):
            await anyio.sleep(0.01)
            calls.append("slow_pass")
            next()

        @app.middleware
        def second(request, next):
            calls.append("second")
            next()

        @app.get("/")
        def index(request):
            calls.append("handler")
            return Response("ok")

        response = await app.handle(_request("GET", "/"))
        assert response.status == 200
        assert calls == ["slow_pass", "second", "handler"]

    async def test_block_applies_to_unrouted_paths(self) -> None:
        app = Bunwork()
        app.middleware(lambda request, next: None)

        response = await app.handle(_request("GET", "/nowhere"))
        assert response.status == 403
        assert response.text == "Middleware blocked the request"

    async def test_middlewares_run_for_unmatched_paths(self) -> None:
        app = Bunwork()
        seen: list[str] = []

        @app.middleware
        def record(request, next):
            seen.append(request.path)
            next()

        response = await app.handle(_request("GET", "/missing"))
        assert response.status == 404
        assert seen == ["/missing"]

    async def test_conditional_block(self) -> None:
        app = Bunwork()

        @app.middleware
        def require_token(request, next):
            if request.headers.get("authorization") == "Bearer secret":
                next()

        app.get("/", lambda request: Response("ok"))

        denied = await app.handle(_request("GET", "/"))
        allowed = await app.handle(
            Request.from_url(
                "GET", "http://localhost/", headers={"Authorization": "Bearer secret"}
            )
        )
        assert denied.status == 403
        assert allowed.status == 200

    async def test_middleware_exception_propagates(self) -> None:
        app = Bunwork()

        @app.middleware
        def broken(request, next):
            raise RuntimeError("middleware failed")

        with pytest.raises(RuntimeError, match="middleware failed"):
            await app.handle(_request("GET", "/"))


class TestAppBlueprints:
    async def test_blueprint_routes_served(self) -> None:
        app = Bunwork()
        users = Blueprint("/users")

        @users.get("/:id")
        def show(request):
            return Response(f"user {request.params['id']}")

        app.register_blueprint(users)

        response = await app.handle(_request("GET", "/users/7"))
        assert response.text == "user 7"

    async def test_blueprint_middleware_runs_after_app_middleware(self) -> None:
        app = Bunwork()
        order: list[str] = []
        bp = Blueprint("/bp")

        @app.middleware
        def app_mw(request, next):
            order.append("app")
            next()

        @bp.middleware
        def bp_mw(request, next):
            order.append("bp")
            next()

        bp.get("/", lambda request: Response("bp"))
        app.register_blueprint(bp)

        await app.handle(_request("GET", "/bp"))
        assert order == ["app", "bp"]

    async def test_blueprint_middleware_is_global(self) -> None:
        app = Bunwork()
        bp = Blueprint("/admin")
        bp.middleware(lambda request, next: None)
        app.get("/public", lambda request: Response("public"))
        app.register_blueprint(bp)

        response = await app.handle(_request("GET", "/public"))
        assert response.status == 403

    async def test_two_blueprints_coexist(self) -> None:
        app = Bunwork()
        a = Blueprint("/a")
        b = Blueprint("/b")
        a.get("/", lambda request: Response("a"))
        b.get("/", lambda request: Response("b"))
        app.register_blueprint(a)
        app.register_blueprint(b)

        assert (await app.handle(_request("GET", "/a"))).text == "a"
        assert (await app.handle(_request("GET", "/b"))).text == "b"

    async def test_later_app_route_replaces_blueprint_route(self) -> None:
        app = Bunwork()
        bp = Blueprint("/users")
        bp.get("/", lambda request: Response("from blueprint"))
        app.register_blueprint(bp)
        app.get("/users", lambda request: Response("from app"))

        response = await app.handle(_request("GET", "/users"))
        assert response.text == "from app"

    def test_double_registration_is_noop(self, caplog: pytest.LogCaptureFixture) -> None:
        app = Bunwork()
        bp = Blueprint("/users")
        bp.middleware(lambda request, next: next())
        bp.get("/", lambda request: Response("users"))

        app.register_blueprint(bp)
        with caplog.at_level(logging.WARNING, logger="bunwork.app"):
            app.register_blueprint(bp)

        assert len(app._middleware) == 1
        assert len(app.routes) == 1
        assert "already registered" in caplog.text

    def test_blueprint_changes_after_merge_not_seen(self) -> None:
        app = Bunwork()
        bp = Blueprint("/users")
        bp.get("/", lambda request: Response("users"))
        app.register_blueprint(bp)

        bp.get("/late", lambda request: Response("late"))
        assert [r.path for r in app.routes] == ["/users"]


class TestAppLifespan:
    async def test_startup_and_shutdown_hooks(self) -> None:
        app = Bunwork()
        events: list[str] = []

        @app.on_startup
        async def start():
            events.append("startup")

        @app.on_shutdown
        def stop():
            events.append("shutdown")

        messages = iter(
            [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        )
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert events == ["startup", "shutdown"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert app._frozen is True

    async def test_startup_failure_reported(self) -> None:
        app = Bunwork()

        @app.on_startup
        def fail():
            raise RuntimeError("no database")

        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "lifespan.startup"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "no database" in sent[0]["message"]

    async def test_unsupported_scope(self) -> None:
        app = Bunwork()

        async def receive() -> dict[str, Any]:
            return {}

        async def send(message: dict[str, Any]) -> None:
            pass

        with pytest.raises(RuntimeError, match="Unsupported"):
            await app({"type": "websocket"}, receive, send)


class TestAppListen:
    def test_listen_uses_config_and_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from bunwork.config import AppConfig

        captured: dict[str, Any] = {}

        def fake_run_server(app, host, port, *, log_level, access_log):
            captured.update(
                app=app, host=host, port=port, log_level=log_level, access_log=access_log
            )

        monkeypatch.setattr("bunwork.server.runner.run_server", fake_run_server)

        app = Bunwork(AppConfig(host="0.0.0.0", log_level="debug"))
        app.listen(8080)

        assert captured["app"] is app
        assert captured["host"] == "0.0.0.0"
        assert captured["port"] == 8080
        assert captured["log_level"] == "debug"
        assert app._frozen is True

    def test_run_delegates_to_listen(self, monkeypatch: pytest.MonkeyPatch) -> None:
        captured: dict[str, Any] = {}

        def fake_run_server(app, host, port, **kwargs):
            captured.update(host=host, port=port)

        monkeypatch.setattr("bunwork.server.runner.run_server", fake_run_server)

        Bunwork().run(host="0.0.0.0", port=9000)

        assert captured == {"host": "0.0.0.0", "port": 9000}

    def test_listen_registers_callback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("bunwork.server.runner.run_server", lambda *a, **kw: None)

        def ready():
            pass

        app = Bunwork()
        app.listen(callback=ready)

        assert app._startup_hooks == [ready]

    def test_listen_after_freeze(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("bunwork.server.runner.run_server", lambda *a, **kw: None)

        def ready():
            pass

        app = Bunwork()
        app._ensure_frozen()
        app.listen(callback=ready)
        app.listen(callback=ready)

        assert app._startup_hooks == [ready]


class TestAppConcurrency:
    async def test_concurrent_requests_keep_their_params(self) -> None:
        app = Bunwork()

        @app.middleware
        async def yield_first(request, next):
            await anyio.sleep(0)
            next()

        @app.get("/u/:id")
        async def show(request):
            await anyio.sleep(0.01)
            return request.params["id"]

        results: dict[int, Any] = {}

        async def fetch(i: int) -> None:
            results[i] = await app.handle(_request("GET", f"/u/{i}"))

        async with anyio.create_task_group() as tg:
            for i in range(50):
                tg.start_soon(fetch, i)

        assert results == {i: str(i) for i in range(50)}
