"""Immutable HTTP request.

Frozen metadata with async body access. Route parameters are attached by
the dispatcher through ``with_params()``, which returns a new request.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import urlsplit

from bunwork._internal.asgi import Receive
from bunwork.http.headers import Headers
from bunwork.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is read asynchronously via ``.body()``, ``.text()``, ``.json()``.

    ``params`` holds the named segments of the matched route pattern,
    e.g. ``{"name": "john"}`` for ``/hello/:name``; it is empty until a
    route with dynamic segments matched.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    params: dict[str, str]
    http_version: str
    scheme: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: body cache, shared between copies made by with_params()
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def target(self) -> str:
        """Request target as sent on the request line (path + query string)."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    @property
    def url(self) -> str:
        """Absolute request URL, e.g. ``http://localhost:3000/hello?x=1``.

        The authority comes from the ``Host`` header, falling back to
        ``server``. With neither, only the target is returned.
        """
        host = self.headers.get("host")
        if host is None and self.server is not None:
            hostname, port = self.server
            default_port = 443 if self.scheme == "https" else 80
            host = hostname if port == default_port else f"{hostname}:{port}"
        if not host:
            return self.target
        return f"{self.scheme}://{host}{self.target}"

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    # -- Route parameters --

    def with_params(self, params: Mapping[str, str]) -> Request:
        """Return a copy with *params* added to the existing ``params``."""
        if not params:
            return self
        return replace(self, params={**self.params, **params})

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached; the ASGI receive is consumed once.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"")),
            params={},
            http_version=scope.get("http_version", "1.1"),
            scheme=scope.get("scheme", "http"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Build a Request without a server, e.g. in tests or scripts::

            request = Request.from_url("GET", "http://localhost/hello/john?x=1")
        """
        parts = urlsplit(url)
        scheme = parts.scheme or "http"
        default_port = 443 if scheme == "https" else 80
        server = (parts.hostname, parts.port or default_port) if parts.hostname else None
        sent = False

        async def receive() -> dict[str, Any]:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return cls(
            method=method.upper(),
            path=parts.path or "/",
            headers=Headers.from_mapping(headers or {}),
            query=QueryParams(parts.query),
            params={},
            http_version="1.1",
            scheme=scheme,
            server=server,
            client=None,
            _receive=receive,
        )
