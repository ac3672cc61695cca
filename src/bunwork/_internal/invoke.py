"""Invoke helpers — call sync or async callables uniformly.

Route handlers and middlewares can be ``def`` or ``async def``. Every
place that calls user code goes through :func:`invoke` so the sync/async
check lives in exactly one place.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable.

    Works with both sync and async callables::

        def hello(request):
            return Response("hi")

        async def slow_hello(request):
            await anyio.sleep(1)
            return Response("hi")
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
