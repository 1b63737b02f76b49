"""Test utilities for crooner applications::

    from crooner.testing import TestClient
"""

from crooner.testing.client import TestClient

__all__ = ["TestClient"]
