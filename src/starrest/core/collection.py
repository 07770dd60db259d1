import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Type, TYPE_CHECKING

from .adapter import ResourceAdapter
from .changes import ChangeEvent, ChangeHandler, PropertyChanges
from .deferred import Deferred
from .resource import Resource, ResourceState

if TYPE_CHECKING:
    from ..transport import Transport

logger = logging.getLogger(__name__)


def resolve_url(*sources: Optional[str]) -> Optional[str]:
    """Return the first configured URL among `sources`, in order."""
    for url in sources:
        if url:
            return url
    return None


class Collection:
    """
    A collection of RESTful resources.

    Holds `Resource` instances of one `model` class in server order, together
    with an index of their ids. `content[i]` and `index[i]` always describe
    the same record: every method that changes one changes the other, and
    the collection follows id changes on the records it holds.

    Args:
        model: Resource subclass held by this collection
        url: Base url of the list endpoint (e.g. '/contacts/active');
            defaults to the `url` configured on `model`
        transport: Transport for requests; defaults to the model's
    """

    def __init__(self, model: Type[Resource], url: Optional[str] = None,
                 transport: Optional['Transport'] = None):
        self.model = model
        self.url = url
        self._transport = transport
        self._changes = PropertyChanges(self)
        self._adapter = ResourceAdapter(self)
        self.content: List[Resource] = []
        self.index: List[Any] = []

    @property
    def transport(self) -> 'Transport':
        if self._transport is not None:
            return self._transport
        return self.model.resource_transport()

    def _request_transport(self) -> 'Transport':
        return self.transport

    # Local state

    def load(self, json: Dict[str, Any]) -> Resource:
        """Create or update a single record from JSON, matched by id."""
        record = self.find_by_id_in_store(json.get(self.model.id_field()))
        if record is not None:
            return record.deserialize(json)

        with self._content_changes():
            record = self.model.create(transport=self._transport).deserialize(json)
            self.content.append(record)
            self.index.append(record._resource_id())
        record.subscribe(self._record_changed)
        return record

    def load_all(self, json: Iterable[Dict[str, Any]]) -> None:
        """Load each record of a JSON array, in order."""
        with self._content_changes():
            for item in json:
                self.load(item)

    def clear_all(self) -> None:
        """Clear this collection's contents (without deleting remote resources)."""
        with self._content_changes():
            for record in self.content:
                record.unsubscribe(self._record_changed)
            self.content = []
            self.index = []

    def remove(self, record: Resource) -> None:
        """Drop a record locally; pair with `record.destroy_resource()` to delete it remotely."""
        for position, candidate in enumerate(self.content):
            if candidate is record:
                with self._content_changes():
                    del self.content[position]
                    del self.index[position]
                record.unsubscribe(self._record_changed)
                return
        raise ValueError(f"{record!r} is not in this collection")

    def find_by_id_in_store(self, resource_id: Any) -> Optional[Resource]:
        if resource_id is None:
            return None
        try:
            return self.content[self.index.index(resource_id)]
        except ValueError:
            return None

    # Remote operations

    def find_all(self) -> Deferred:
        """Replace this collection's contents with the records at `_url()`."""
        def replace(json):
            with self._content_changes():
                self.clear_all()
                self.load_all(json or [])

        return self._resource_request("GET").done(replace)

    def find_by_id(self, resource_id: Any) -> Resource:
        record = self.find_by_id_in_store(resource_id)
        if record is None:
            record = self.find_from_server(resource_id)
        return record

    def find_from_server(self, resource_id: Any) -> Resource:
        """
        Return a placeholder for `resource_id` and fetch it in the background.

        The placeholder starts in the "finding" state and is filled in place
        when the response arrives, ending "loaded". If the request fails the
        placeholder stays "finding".
        """
        record = self.model.create(transport=self._transport,
                                   **{self.model.id_field(): resource_id,
                                      "state": ResourceState.FINDING})

        def loaded(json):
            if isinstance(json, list):
                json = json[0] if json else None
            with record.property_changes():
                if json:
                    record.deserialize(json)
                record.state = ResourceState.LOADED

        def failed(error):
            logger.warning(f"{self.model.__name__} {resource_id} could not be fetched: {error}")

        url = self._url()
        self._resource_request("GET", url=None if url is None else f"{url}/{resource_id}") \
            .done(loaded) \
            .fail(failed)
        return record

    def _resource_request(self, method: str, data: Any = None, url: Optional[str] = None) -> Deferred:
        if url is None:
            url = self._url()
        return self._adapter.request(method, data=data, url=url)

    def _url(self) -> Optional[str]:
        """Base URL for requests: this collection's `url`, else the model's."""
        return resolve_url(self.url, self.model.base_url())

    # Change notification

    def subscribe(self, handler: ChangeHandler) -> ChangeHandler:
        """Call `handler(event)` whenever the membership of `content` changes."""
        return self._changes.subscribe(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        self._changes.unsubscribe(handler)

    def _record_changed(self, event: ChangeEvent) -> None:
        id_field = self.model.id_field()
        if id_field not in event.changes:
            return
        for position, candidate in enumerate(self.content):
            if candidate is event.source:
                self.index[position] = event.changes[id_field]
                return

    @contextmanager
    def _content_changes(self) -> Iterator[None]:
        outermost = not self._changes.in_batch
        previous = tuple(self.content) if outermost else None
        with self._changes.batch():
            yield
            if outermost:
                self._changes.record("content", previous, tuple(self.content))

    # Sequence protocol

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.content)

    def __getitem__(self, position: int) -> Resource:
        return self.content[position]

    def __contains__(self, record: object) -> bool:
        return any(candidate is record for candidate in self.content)

    def __repr__(self) -> str:
        return f"Collection({self.model.__name__}, {len(self.content)} records)"
