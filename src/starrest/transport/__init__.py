"""
StarREST Transport Module

HTTP backends performing resource requests, plus the process-wide default
transport used by resources and collections that were not given one.
"""

from typing import Optional

from ..config import StarRestConfig
from .base import Transport
from .httpx_transport import HttpxTransport

_default_transport: Optional[Transport] = None


def get_default_transport() -> Transport:
    """Get the default transport, building it from the environment on first use."""
    global _default_transport
    if _default_transport is None:
        _default_transport = HttpxTransport.from_config(StarRestConfig.from_env().transport)
    return _default_transport


def set_default_transport(transport: Optional[Transport]) -> None:
    """Replace the default transport (None resets it to the lazily built one)."""
    global _default_transport
    _default_transport = transport


__all__ = [
    "Transport",
    "HttpxTransport",
    "get_default_transport",
    "set_default_transport",
]
