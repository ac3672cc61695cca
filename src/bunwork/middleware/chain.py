"""Ordered middleware pipeline with short-circuit semantics."""

from collections.abc import Iterable, Iterator

from bunwork._internal.invoke import invoke
from bunwork.errors import RegistrationError
from bunwork.http.request import Request
from bunwork.middleware.protocol import Middleware


class _Continuation:
    """The ``next`` callable for one middleware invocation."""

    __slots__ = ("called",)

    def __init__(self) -> None:
        self.called = False

    def __call__(self) -> None:
        self.called = True


class MiddlewareChain:
    """Append-only list of middlewares, run strictly in registration order.

    Each middleware is awaited to completion before the chain checks
    whether it called ``next()``; middlewares never overlap for the same
    request. The first one that does not call ``next()`` stops the chain.
    """

    __slots__ = ("_frozen", "_middlewares")

    def __init__(self) -> None:
        self._middlewares: list[Middleware] = []
        self._frozen = False

    def use(self, middleware: Middleware) -> None:
        """Append *middleware* to the end of the chain."""
        if self._frozen:
            msg = "Cannot add middleware after the chain is frozen."
            raise RuntimeError(msg)
        if not callable(middleware):
            msg = f"Middleware must be callable, got {type(middleware).__name__}."
            raise RegistrationError(msg)
        self._middlewares.append(middleware)

    def extend(self, middlewares: Iterable[Middleware]) -> None:
        """Append several middlewares, keeping their order."""
        for middleware in middlewares:
            self.use(middleware)

    def freeze(self) -> None:
        self._frozen = True

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    async def run(self, request: Request) -> bool:
        """Run every middleware against *request*.

        Returns ``True`` when all of them called ``next()``, ``False`` as
        soon as one did not.
        """
        for middleware in self._middlewares:
            proceed = _Continuation()
            await invoke(middleware, request, proceed)
            if not proceed.called:
                return False
        return True
