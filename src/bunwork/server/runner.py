"""Serve a Bunwork app over HTTP with uvicorn.

The app object is a plain ASGI callable, so the server receives the live
instance rather than an import string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bunwork.app import Bunwork


def run_server(
    app: Bunwork,
    host: str,
    port: int,
    *,
    log_level: str = "info",
    access_log: bool = True,
) -> None:
    """Bind *host*:*port* and serve *app* until interrupted.

    Args:
        app: Bunwork instance (already frozen by the caller).
        host: Bind host address.
        port: Bind port number.
        log_level: uvicorn log level (debug, info, warning, error, critical).
        access_log: Emit uvicorn's per-request access lines.
    """
    import uvicorn

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level,
        access_log=access_log,
        lifespan="on",
    )
    server = uvicorn.Server(config)
    server.run()
