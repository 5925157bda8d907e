"""Test utilities for muxstack routers::

    from muxstack.testing import TestClient
"""

from muxstack.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
