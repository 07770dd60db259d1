"""
StarREST Core Module

Resources, collections and the plumbing they share: deferred results,
change notification and the request adapter.
"""

from .adapter import RequestParams, ResourceAdapter
from .changes import ChangeEvent, PropertyChanges
from .collection import Collection, resolve_url
from .deferred import Deferred, DeferredState
from .resource import Resource, ResourceConfig, ResourceState

__all__ = [
    "RequestParams",
    "ResourceAdapter",
    "ChangeEvent",
    "PropertyChanges",
    "Collection",
    "resolve_url",
    "Deferred",
    "DeferredState",
    "Resource",
    "ResourceConfig",
    "ResourceState",
]
