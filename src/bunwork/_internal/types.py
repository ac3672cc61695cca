"""Shared type aliases used across bunwork modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: takes the Request, returns a Response or an awaitable of one
Handler: TypeAlias = Callable[..., Any]
