"""
Shared fixtures: a fake HTTP server behind httpx.MockTransport and the
Contact resource used throughout the suite.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from starrest import Collection, HttpxTransport, Resource, ResourceConfig, Store, set_default_transport


class Contact(Resource):
    model_config = ResourceConfig(url="/contacts",
                                  resource_name="contact",
                                  resource_properties=["first_name", "last_name"])

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class FakeServer:
    """Canned responses keyed by (method, path); anything else is a 404."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Tuple[int, Any]]] = {}
        self.requests: List[httpx.Request] = []

    def respond_with(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        """Queue a response; the last queued response for a route repeats."""
        self.routes.setdefault((method, path), []).append((status, body))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self.routes.get((request.method, request.url.path))
        if not responses:
            return httpx.Response(404, json={"error": "not found"})

        status, body = responses.pop(0) if len(responses) > 1 else responses[0]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def request_json(self, position: int = -1) -> Any:
        return json.loads(self.requests[position].content)


@pytest.fixture
def server():
    return FakeServer()


@pytest_asyncio.fixture
async def transport(server):
    transport = HttpxTransport(base_url="http://testserver",
                               transport=httpx.MockTransport(server.handle))
    set_default_transport(transport)
    yield transport
    await transport.aclose()
    set_default_transport(None)


@pytest.fixture
def store():
    store = Store()
    store.contacts = Collection(Contact)
    return store
