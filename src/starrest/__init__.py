"""
StarREST - Observable RESTful Resources

Maps JSON resources behind a base URL onto observable pydantic models and
keeps identity-indexed collections of them in sync with the server.
"""

from .core import (
    Resource, ResourceConfig, ResourceState,
    Collection, Deferred, DeferredState,
    ChangeEvent, PropertyChanges, RequestParams,
)
from .config import Environment, LoggingConfig, StarRestConfig, TransportConfig, configure_logging
from .errors import ResourceValidationError, StarRestError, StoreError, TransportClosedError
from .store import Store
from .transport import HttpxTransport, Transport, get_default_transport, set_default_transport
from .configurator import configure_starrest

__all__ = [
    # Core
    'Resource',
    'ResourceConfig',
    'ResourceState',
    'Collection',
    'Deferred',
    'DeferredState',
    'ChangeEvent',
    'PropertyChanges',
    'RequestParams',
    'Store',

    # Transport
    'Transport',
    'HttpxTransport',
    'get_default_transport',
    'set_default_transport',

    # Configuration
    'Environment',
    'LoggingConfig',
    'StarRestConfig',
    'TransportConfig',
    'configure_logging',
    'configure_starrest',

    # Errors
    'StarRestError',
    'ResourceValidationError',
    'StoreError',
    'TransportClosedError',
]
