"""
StarREST Errors

Exceptions raised by the client layer. Transport failures are not wrapped:
the HTTP client's own exceptions reach the caller unchanged.
"""

from typing import Any


class StarRestError(Exception):
    """Base class for StarREST errors."""
    pass


class ResourceValidationError(StarRestError):
    """Raised when awaiting a save that was rejected by `validate_resource()`."""

    def __init__(self, error: Any):
        self.error = error
        super().__init__(f"Resource validation failed: {error}")


class StoreError(StarRestError):
    """Unknown or conflicting collection name in a Store."""
    pass


class TransportClosedError(StarRestError):
    """Request issued on a transport that has already been closed."""
    pass
