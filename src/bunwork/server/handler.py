"""ASGI handler — translates ASGI scope/messages to bunwork types.

The only component that touches raw ASGI directly. Builds a Request from
the scope, hands it to ``Bunwork.handle``, and sends the result back.

``handle`` lets handler and middleware exceptions propagate. This layer is
the listener, so it is where they stop: they are logged and answered with
a 500 so the client always gets a response. With
``AppConfig(debug=True)`` the 500 body carries the traceback.
"""

import logging
import traceback
from typing import TYPE_CHECKING

from bunwork._internal.asgi import Receive, Scope, Send
from bunwork.http.request import Request
from bunwork.http.response import Response
from bunwork.server.negotiation import to_response
from bunwork.server.sender import send_response

if TYPE_CHECKING:
    from bunwork.app import Bunwork

logger = logging.getLogger("bunwork.server")

INTERNAL_ERROR_BODY = "Internal Server Error"


async def handle_request(scope: Scope, receive: Receive, send: Send, *, app: "Bunwork") -> None:
    """Process a single HTTP request through the dispatcher."""
    request = Request.from_asgi(scope, receive)

    try:
        response = to_response(await app.handle(request))
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        body = traceback.format_exc() if app.config.debug else INTERNAL_ERROR_BODY
        response = Response(body=body, status=500)

    await send_response(response, send)
