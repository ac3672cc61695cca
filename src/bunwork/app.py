"""Bunwork application class — the request dispatcher.

Mutable during setup (routes, middleware, static mounts, blueprints).
Frozen on the first request, the ASGI lifespan startup, or ``listen()``.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from bunwork._internal.asgi import Receive, Scope, Send
from bunwork._internal.invoke import invoke
from bunwork._internal.types import Handler
from bunwork.blueprint import Blueprint
from bunwork.config import AppConfig
from bunwork.errors import RegistrationError
from bunwork.http.request import Request
from bunwork.http.response import Response
from bunwork.middleware.chain import MiddlewareChain
from bunwork.middleware.protocol import Middleware
from bunwork.routing.registry import RouteRegistry
from bunwork.routing.route import Route
from bunwork.routing.router import Router
from bunwork.server.handler import handle_request
from bunwork.static import StaticRoutes

logger = logging.getLogger("bunwork.app")

BLOCKED_BODY = "Middleware blocked the request"
NOT_FOUND_BODY = "Not Found"


def blocked() -> Response:
    return Response(body=BLOCKED_BODY, status=403)


def not_found() -> Response:
    return Response(body=NOT_FOUND_BODY, status=404)


class Bunwork(RouteRegistry):
    """The bunwork dispatcher.

    Usage::

        app = Bunwork()
        app.middleware(request_logger)

        @app.get("/hello/:name")
        def hello(request):
            return Response(f"Hello, {request.params['name']}!")

        app.register_blueprint(users)
        app.static("/assets", "./public")
        app.listen(3000)

    Request pipeline (``handle``): middlewares in registration order, then
    the route table, then static mounts, then 404.

    Thread safety:
        Registration is single-threaded (application startup). The freeze
        transition uses a Lock + double-check so exactly one thread seals
        the route table and middleware chain; afterwards both are only
        read, so any number of requests can be dispatched concurrently.
    """

    __slots__ = (
        "_blueprints",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_static",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._middleware = MiddlewareChain()
        self._static = StaticRoutes()
        self._blueprints: list[Blueprint] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Route registration --

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        """Register *handler* for *method* and *path*.

        Registering the same method and pattern again replaces the
        earlier handler.
        """
        self._check_not_frozen()
        if not isinstance(method, str) or not method:
            msg = f"Route {path!r} needs an HTTP method, got {method!r}."
            raise RegistrationError(msg)
        self._router.add(Route(method=method.upper(), path=path, handler=handler))
        logger.debug("Registered %s %s", method.upper(), path)

    @property
    def routes(self) -> list[Route]:
        """Every registered route, including merged blueprint routes."""
        return self._router.routes

    # -- Middleware --

    def middleware(self, middleware: Middleware) -> Middleware:
        """Append a middleware to the pipeline. Usable as a decorator."""
        self._check_not_frozen()
        self._middleware.use(middleware)
        return middleware

    # -- Static files --

    def static(self, prefix: str, directory: str | Path) -> None:
        """Serve files from *directory* for request paths starting with *prefix*.

        Static mounts are only consulted when no route matched.
        """
        self._check_not_frozen()
        if not isinstance(prefix, str) or not prefix:
            msg = f"Static prefix must be a non-empty string, got {prefix!r}."
            raise RegistrationError(msg)
        self._static.add(prefix, directory)
        logger.debug("Mounted static %s -> %s", prefix, directory)

    # -- Blueprints --

    def register_blueprint(self, blueprint: Blueprint) -> None:
        """Merge *blueprint*'s middlewares and routes into this app.

        Middlewares are appended after every middleware registered so far,
        in the blueprint's order. Routes keep their prefixed paths. Merging
        the same blueprint twice is a no-op.
        """
        self._check_not_frozen()
        if any(merged is blueprint for merged in self._blueprints):
            logger.warning("Blueprint %s is already registered; skipping.", blueprint.name)
            return

        self._middleware.extend(blueprint.middlewares)
        routes = blueprint.routes
        for route in routes:
            self._router.add(route)
        self._blueprints.append(blueprint)
        logger.debug(
            "Merged blueprint %s: %d route(s), %d middleware(s)",
            blueprint.name,
            len(routes),
            len(blueprint.middlewares),
        )

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Dispatch --

    async def handle(self, request: Request) -> Any:
        """Dispatch one request and return the response.

        1. Run the middleware chain; a middleware that does not call
           ``next()`` yields 403 ``Middleware blocked the request``.
        2. Match the route table; on a match the handler receives the
           request with ``params`` filled in, and its return value is
           passed back untouched.
        3. Otherwise try the static mounts (200 or 404 ``File Not Found``).
        4. Otherwise 404 ``Not Found``.

        Exceptions raised by middlewares or handlers propagate.
        """
        self._ensure_frozen()

        if not await self._middleware.run(request):
            return blocked()

        match = self._router.match(request.method, request.path)
        if match is not None:
            return await invoke(match.handler, request.with_params(match.params))

        response = await self._static.serve(request.path)
        if response is not None:
            return response

        return not_found()

    # -- Server --

    def listen(
        self,
        port: int | None = None,
        callback: Callable[..., Any] | None = None,
        *,
        host: str | None = None,
    ) -> None:
        """Freeze the app and serve it until interrupted.

        Args:
            port: Override ``config.port``.
            callback: Called once the server has started (sync or async).
            host: Override ``config.host``.

        Works on an app that is already frozen (after requests were
        handled or a previous ``listen``).
        """
        self._ensure_frozen()
        # Hooks are only read at lifespan startup, which has not happened yet
        if callback is not None and callback not in self._startup_hooks:
            self._startup_hooks.append(callback)

        _host = host or self.config.host
        _port = port or self.config.port
        logger.info("Serving %d route(s) on http://%s:%d", len(self._router), _host, _port)

        from bunwork.server.runner import run_server

        run_server(
            self,
            _host,
            _port,
            log_level=self.config.log_level,
            access_log=self.config.access_log,
        )

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app on *host*:*port*, falling back to ``config``."""
        self.listen(port, host=host)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            msg = f"Unsupported ASGI scope type {scope['type']!r}."
            raise RuntimeError(msg)

        await handle_request(scope, receive, send, app=self)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, then runs startup/shutdown hooks and
        signals completion back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._router.compile()
            self._middleware.freeze()
            self._frozen = True
            logger.debug(
                "Frozen with %d route(s), %d middleware(s), %d static mount(s)",
                len(self._router),
                len(self._middleware),
                len(self._static),
            )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and blueprints before calling app.listen()."
            )
            raise RuntimeError(msg)
