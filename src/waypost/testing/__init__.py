"""Testing utilities for waypost applications."""

from waypost.testing.client import TestClient

__all__ = ["TestClient"]
