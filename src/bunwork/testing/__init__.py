"""Test utilities for bunwork applications.

    from bunwork.testing import TestClient
"""

from bunwork.testing.client import TestClient

__all__ = ["TestClient"]
