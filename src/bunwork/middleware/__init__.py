"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request, next: Next) -> None

Calling ``next()`` lets the request continue; not calling it blocks the
request with a 403.

Built-in middleware:
    request_logger -- Log one access line per request
"""

from bunwork.middleware.chain import MiddlewareChain
from bunwork.middleware.logger import request_logger
from bunwork.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "MiddlewareChain",
    "Next",
    "request_logger",
]
