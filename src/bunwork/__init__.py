"""Bunwork — a minimal HTTP request dispatcher.

Ordered middleware, a trie route table with ``:name`` parameters,
blueprints, and a static-file fallback, served as an ASGI app.

Basic usage::

    from bunwork import Bunwork, Response

    app = Bunwork()

    @app.get("/hello/:name")
    def hello(request):
        return Response(f"Hello, {request.params['name']}!")

    app.listen(3000)
"""

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "Blueprint",
    "Bunwork",
    "BunworkError",
    "Middleware",
    "Next",
    "RegistrationError",
    "Request",
    "Response",
    "request_logger",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import bunwork`` fast while providing a clean top-level API.
    """
    if name == "Bunwork":
        from bunwork.app import Bunwork

        return Bunwork

    if name == "Blueprint":
        from bunwork.blueprint import Blueprint

        return Blueprint

    if name == "AppConfig":
        from bunwork.config import AppConfig

        return AppConfig

    if name == "Request":
        from bunwork.http.request import Request

        return Request

    if name == "Response":
        from bunwork.http.response import Response

        return Response

    if name in ("Middleware", "Next", "request_logger"):
        from bunwork import middleware as _mw

        return getattr(_mw, name)

    if name in ("BunworkError", "RegistrationError"):
        from bunwork import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
