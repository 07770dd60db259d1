"""
Resource Adapter

The request capability shared by Resource and Collection. Each owner embeds
a ResourceAdapter; the adapter asks the owner for its URL and transport,
lets the owner adjust the request through an optional
`_prepare_resource_request(params)` hook, then hands the request to the
transport.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .deferred import Deferred

logger = logging.getLogger(__name__)


@dataclass
class RequestParams:
    """Parameters of one resource request."""
    method: str
    url: Optional[str] = None
    data: Any = None
    data_type: str = "json"
    headers: Dict[str, str] = field(default_factory=dict)


class ResourceAdapter:
    """Issues requests on behalf of an owner exposing `_url()` and `_request_transport()`."""

    def __init__(self, owner: Any):
        self.owner = owner

    def request(self, method: str, data: Any = None, url: Optional[str] = None) -> 'Deferred':
        params = RequestParams(method=method,
                               url=self.owner._url() if url is None else url,
                               data=data)

        prepare = getattr(self.owner, "_prepare_resource_request", None)
        if prepare is not None:
            prepare(params)

        logger.debug(f"{type(self.owner).__name__}: {params.method} {params.url}")
        return self.owner._request_transport().request(params)
