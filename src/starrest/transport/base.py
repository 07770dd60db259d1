"""
StarREST Transport Layer - Base Classes

This module provides the abstract interface every transport implements.
"""

from abc import ABC, abstractmethod

from ..core.adapter import RequestParams
from ..core.deferred import Deferred


class Transport(ABC):
    """
    Abstract base class for transports.

    A transport performs one HTTP request per call and reports the outcome
    through the returned Deferred: `done` receives the decoded response body,
    `fail` receives the error. Routing between the two is entirely the
    transport's decision; resources and collections never look at status
    codes.
    """

    @abstractmethod
    def request(self, params: RequestParams) -> Deferred:
        """
        Start a request.

        Args:
            params: Method, URL, body and response format

        Returns:
            Deferred settled with the decoded response or the failure
        """
        pass

    async def wait_pending(self) -> None:
        """Wait until no request started by this transport is in flight."""
        pass

    async def aclose(self) -> None:
        """Release resources held by the transport."""
        pass

    async def __aenter__(self) -> 'Transport':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
