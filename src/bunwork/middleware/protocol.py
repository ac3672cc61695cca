"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    def my_mw(request: Request, next: Next) -> None: ...
    async def my_mw(request: Request, next: Next) -> None: ...

No base class required. The middleware lets the request through by
calling ``next()``; returning without calling it blocks the request.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from bunwork.http.request import Request

# Continuation signal handed to every middleware
Next: TypeAlias = Callable[[], None]


class Middleware(Protocol):
    """Protocol for bunwork middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def require_token(request: Request, next: Next) -> None:
            if "authorization" in request.headers:
                next()

        # Class middleware
        class IPAllowList:
            def __init__(self, allowed: set[str]) -> None:
                self.allowed = allowed

            def __call__(self, request: Request, next: Next) -> None:
                if request.client and request.client[0] in self.allowed:
                    next()

    The return value is ignored. Exceptions propagate to the caller of
    ``Bunwork.handle``.
    """

    def __call__(self, request: Request, next: Next) -> Awaitable[None] | None: ...
