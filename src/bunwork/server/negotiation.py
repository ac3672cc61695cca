"""Coerce handler return values into a Response for the wire.

``Bunwork.handle`` returns whatever the handler returned. Only the ASGI
layer needs a concrete ``Response``, so the conversion happens here:

- ``Response`` -> as-is
- ``str`` / ``bytes`` -> 200 plain-text body
- ``dict`` / ``list`` -> ``Response.json()``
"""

from typing import Any

from bunwork.http.response import Response


def to_response(value: Any) -> Response:
    """Convert a handler return value to a ``Response``.

    Raises ``TypeError`` for values with no wire representation.
    """
    match value:
        case Response():
            return value
        case str() | bytes():
            return Response(body=value)
        case dict() | list():
            return Response.json(value)
        case _:
            msg = (
                f"Handler returned {type(value).__name__}, expected Response, "
                "str, bytes, dict, or list."
            )
            raise TypeError(msg)
