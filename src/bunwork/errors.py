"""Bunwork exception hierarchy.

Only registration problems are exceptions. An unmatched route, a blocked
middleware chain, and a missing static file are ordinary outcomes that the
dispatcher turns into responses.
"""


class BunworkError(Exception):
    """Base for all bunwork-specific errors."""


class RegistrationError(BunworkError, ValueError):
    """Raised when a route, middleware, or blueprint cannot be registered.

    The route table is left untouched when this is raised.
    """
