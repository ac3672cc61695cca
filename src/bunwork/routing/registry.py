"""Route registration helpers shared by ``Bunwork`` and ``Blueprint``.

Subclasses implement ``add_route()``; everything else funnels into it.
Each helper works both as a plain call and as a decorator::

    app.get("/", index)

    @app.get("/hello/:name")
    def hello(request):
        return Response(f"Hello, {request.params['name']}!")
"""

from collections.abc import Callable, Iterable
from typing import TypeAlias

from bunwork._internal.types import Handler

# The handler itself (direct call) or a decorator (handler omitted)
Registered: TypeAlias = Handler | Callable[[Handler], Handler]


class RouteRegistry:
    """Mixin providing ``route``/``get``/``post``/... on top of ``add_route``."""

    __slots__ = ()

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        raise NotImplementedError

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``:name`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """
        method_list = list(methods or ["GET"])

        def decorator(func: Handler) -> Handler:
            for method in method_list:
                self.add_route(method, path, func)
            return func

        return decorator

    def get(self, path: str, handler: Handler | None = None) -> Registered:
        """Register a GET route."""
        return self._register("GET", path, handler)

    def post(self, path: str, handler: Handler | None = None) -> Registered:
        """Register a POST route."""
        return self._register("POST", path, handler)

    def put(self, path: str, handler: Handler | None = None) -> Registered:
        """Register a PUT route."""
        return self._register("PUT", path, handler)

    def patch(self, path: str, handler: Handler | None = None) -> Registered:
        """Register a PATCH route."""
        return self._register("PATCH", path, handler)

    def delete(self, path: str, handler: Handler | None = None) -> Registered:
        """Register a DELETE route."""
        return self._register("DELETE", path, handler)

    def _register(
        self,
        method: str,
        path: str,
        handler: Handler | None,
    ) -> Registered:
        if handler is None:
            return self.route(path, methods=[method])
        self.add_route(method, path, handler)
        return handler
