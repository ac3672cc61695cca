"""Blueprints — prefixed bundles of routes and middlewares.

A blueprint cannot dispatch on its own. Its contents take effect only when
merged into an app with ``Bunwork.register_blueprint()``.
"""

import logging

from bunwork._internal.types import Handler
from bunwork.errors import RegistrationError
from bunwork.middleware.protocol import Middleware
from bunwork.routing.registry import RouteRegistry
from bunwork.routing.route import Route
from bunwork.routing.router import Router

logger = logging.getLogger("bunwork.app")


def join_path(prefix: str, path: str) -> str:
    """Join a blueprint prefix and a route path with exactly one slash.

    Examples::

        join_path("/users", "/:id")   -> "/users/:id"
        join_path("/users/", "/:id")  -> "/users/:id"
        join_path("/users", "/")      -> "/users"
        join_path("", "/health")      -> "/health"
    """
    if not isinstance(path, str) or not path.startswith("/"):
        msg = f"Route path {path!r} must be a string starting with '/'."
        raise RegistrationError(msg)
    base = prefix.rstrip("/")
    rest = path.lstrip("/")
    if not rest:
        return base or "/"
    return f"{base}/{rest}"


class Blueprint(RouteRegistry):
    """A prefixed, mergeable bundle of routes and middlewares.

    Usage::

        users = Blueprint("/users")

        @users.get("/:id")
        def show_user(request):
            return Response.json(find_user(request.params["id"]))

        app.register_blueprint(users)   # serves GET /users/:id

    The prefix is applied when a route is registered here, so the
    blueprint's own table already holds the final paths.
    """

    __slots__ = ("_middlewares", "_router", "name", "prefix")

    def __init__(self, prefix: str = "", *, name: str | None = None) -> None:
        if not isinstance(prefix, str) or (prefix and not prefix.startswith("/")):
            msg = f"Blueprint prefix {prefix!r} must be a string starting with '/'."
            raise RegistrationError(msg)
        self.prefix = prefix
        self.name = name or prefix or "/"
        self._router = Router()
        self._middlewares: list[Middleware] = []

    def __repr__(self) -> str:
        return f"Blueprint({self.prefix!r}, name={self.name!r})"

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        """Register *handler* at ``prefix + path``; the same spot again replaces it."""
        if not isinstance(method, str) or not method:
            msg = f"Route {path!r} needs an HTTP method, got {method!r}."
            raise RegistrationError(msg)
        full_path = join_path(self.prefix, path)
        self._router.add(Route(method=method.upper(), path=full_path, handler=handler))
        logger.debug("Blueprint %s: registered %s %s", self.name, method.upper(), full_path)

    def middleware(self, middleware: Middleware) -> Middleware:
        """Add a middleware that runs for every request once merged.

        Usable as a decorator.
        """
        if not callable(middleware):
            msg = f"Middleware must be callable, got {type(middleware).__name__}."
            raise RegistrationError(msg)
        self._middlewares.append(middleware)
        return middleware

    @property
    def routes(self) -> list[Route]:
        """Routes with their prefixed paths."""
        return self._router.routes

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        return tuple(self._middlewares)
