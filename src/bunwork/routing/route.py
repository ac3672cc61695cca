"""Route, PathSegment, and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Literal: ``/users``  (is_param=False)
    Param:   ``/:id``    (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route: one method, one path pattern, one handler."""

    method: str
    path: str
    handler: Callable[..., Any]

    @property
    def name(self) -> str:
        """Handler name for introspection (``bunwork routes``)."""
        return getattr(self.handler, "__name__", repr(self.handler))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    params: dict[str, str] = field(default_factory=dict)

    @property
    def handler(self) -> Callable[..., Any]:
        return self.route.handler
