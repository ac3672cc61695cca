"""Access logging middleware.

Logs one line per request on the ``bunwork.access`` logger and always
lets the request through.
"""

import logging
from datetime import UTC, datetime

from bunwork.http.request import Request
from bunwork.middleware.protocol import Next

logger = logging.getLogger("bunwork.access")


def request_logger(request: Request, next: Next) -> None:
    """Log ``[timestamp] METHOD request to URL`` and continue.

    Usage::

        app.middleware(request_logger)
    """
    timestamp = datetime.now(UTC).isoformat()
    logger.info("[%s] %s request to %s", timestamp, request.method, request.url)
    next()
