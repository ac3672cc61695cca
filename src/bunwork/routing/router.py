"""Route table with trie-based path matching.

One prefix tree per HTTP method. Routes are registered during setup and
the table is frozen (``compile()``) before the first request is served.
"""

from bunwork.errors import RegistrationError
from bunwork.routing.route import PathSegment, Route, RouteMatch

PARAM_SIGIL = ":"


def split_path(path: str) -> list[str]:
    """Split a concrete request path into its non-empty segments.

    Leading, trailing, and repeated slashes are not significant, so
    ``""``, ``"/"`` and ``"//"`` all yield the zero-segment root path.
    """
    return [part for part in path.split("/") if part]


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/"               -> []
        "/users"          -> [PathSegment("users")]
        "/users/:id"      -> [PathSegment("users"),
                              PathSegment(":id", is_param=True, param_name="id")]

    Raises ``RegistrationError`` for an empty pattern, a pattern without
    a leading slash, or a parameter segment without a name.
    """
    if not isinstance(path, str) or not path:
        msg = f"Route path must be a non-empty string, got {path!r}."
        raise RegistrationError(msg)
    if not path.startswith("/"):
        msg = f"Route path {path!r} must start with '/'."
        raise RegistrationError(msg)

    segments: list[PathSegment] = []
    for part in split_path(path):
        if part.startswith(PARAM_SIGIL):
            name = part[len(PARAM_SIGIL) :]
            if not name:
                msg = f"Route path {path!r} has a parameter segment without a name."
                raise RegistrationError(msg)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in a per-method route trie."""

    __slots__ = ("children", "param_child", "param_names", "route")

    def __init__(self) -> None:
        # Literal segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single dynamic child shared by every ":name" at this position
        self.param_child: _TrieNode | None = None
        # Set only on nodes where a registered pattern terminates
        self.route: Route | None = None
        # Parameter names of that pattern, in path order
        self.param_names: tuple[str, ...] = ()


class Router:
    """Route table with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("GET", "/users/:id", show_user))
        router.compile()
        match = router.match("GET", "/users/42")
        match.params  # {"id": "42"}

    A literal child always wins over the dynamic child at the same
    position and matching never backtracks, so ``/users/me`` shadows
    ``/users/:id`` for the request ``/users/me``.
    """

    __slots__ = ("_compiled", "_roots")

    def __init__(self) -> None:
        self._roots: dict[str, _TrieNode] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Insert *route*, replacing any route registered at the same node."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if not route.method:
            msg = f"Route {route.path!r} needs an HTTP method."
            raise RegistrationError(msg)
        if not callable(route.handler):
            msg = f"Handler for {route.method} {route.path!r} is not callable."
            raise RegistrationError(msg)

        # Parse before touching the trie so a bad pattern leaves it intact
        segments = parse_path(route.path)

        node = self._roots.setdefault(route.method.upper(), _TrieNode())
        for seg in segments:
            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _TrieNode()
                node = node.param_child
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        node.route = route
        node.param_names = tuple(seg.param_name or "" for seg in segments if seg.is_param)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Match a request method and path.

        Returns a ``RouteMatch`` on success and ``None`` when no route
        terminates at the walked node for *method*.
        """
        node = self._roots.get(method.upper())
        if node is None:
            return None

        values: list[str] = []
        for part in split_path(path):
            child = node.children.get(part)
            if child is None:
                child = node.param_child
                if child is None:
                    return None
                values.append(part)
            node = child

        if node.route is None:
            return None
        # A repeated parameter name keeps its last bound value
        params = dict(zip(node.param_names, values, strict=True))
        return RouteMatch(route=node.route, params=params)

    @property
    def routes(self) -> list[Route]:
        """Return every registered route, grouped by method."""
        result: list[Route] = []
        for root in self._roots.values():
            self._collect_routes(root, result)
        return result

    def _collect_routes(self, node: _TrieNode, result: list[Route]) -> None:
        if node.route is not None:
            result.append(node.route)
        for child in node.children.values():
            self._collect_routes(child, result)
        if node.param_child is not None:
            self._collect_routes(node.param_child, result)

    def __len__(self) -> int:
        return len(self.routes)
