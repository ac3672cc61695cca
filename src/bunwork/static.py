"""Static file fallback.

Consulted by the dispatcher only after no route matched. Each mount maps
a URL prefix to a directory; the first mount whose prefix starts the
request path decides the response.
"""

import mimetypes
from collections.abc import Iterator
from pathlib import Path

import anyio

from bunwork.http.response import Response

FILE_NOT_FOUND_BODY = "File Not Found"


class StaticRoutes:
    """Ordered ``prefix -> directory`` table.

    Usage::

        static = StaticRoutes()
        static.add("/assets", "./public")
        response = await static.serve("/assets/app.css")

    Security: the resolved file must stay inside the mounted directory.
    Any failure (missing file, a directory, traversal outside the root,
    permission error) yields the same 404 ``File Not Found`` response.
    """

    __slots__ = ("_mounts",)

    def __init__(self) -> None:
        self._mounts: dict[str, Path] = {}

    def add(self, prefix: str, directory: str | Path) -> None:
        """Mount *directory* under *prefix*. Re-mounting a prefix replaces it."""
        self._mounts[prefix] = Path(directory).resolve()

    def __iter__(self) -> Iterator[tuple[str, Path]]:
        return iter(self._mounts.items())

    def __len__(self) -> int:
        return len(self._mounts)

    async def serve(self, path: str) -> Response | None:
        """Serve *path* from the first matching mount, or ``None``."""
        for prefix, directory in self._mounts.items():
            if path.startswith(prefix):
                return await self._read(directory, path[len(prefix) :])
        return None

    async def _read(self, directory: Path, relative: str) -> Response:
        try:
            file_path = (directory / relative.lstrip("/")).resolve()
            if not file_path.is_relative_to(directory):
                return file_not_found()
            body = await anyio.Path(file_path).read_bytes()
        # ValueError: embedded NUL byte; RuntimeError: symlink loop
        except (OSError, RuntimeError, ValueError):
            return file_not_found()

        content_type, _ = mimetypes.guess_type(file_path.name)
        return Response(body=body, content_type=content_type or "application/octet-stream")


def file_not_found() -> Response:
    return Response(body=FILE_NOT_FOUND_BODY, status=404)
