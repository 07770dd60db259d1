from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, PrivateAttr

from .adapter import ResourceAdapter
from .changes import MISSING, ChangeHandler, PropertyChanges
from .deferred import Deferred

if TYPE_CHECKING:
    from ..transport import Transport


class ResourceConfig(ConfigDict):
    """Configuration for all resource classes."""
    url: Optional[str]
    resource_id_field: str
    resource_name: Optional[str]
    resource_properties: List[str]
    transport: Optional['Transport']


class ResourceState(str, Enum):
    """Progress of a record fetched on demand."""
    FINDING = "finding"
    LOADED = "loaded"


class Resource(BaseModel):
    """
    A model class for RESTful resources.

    Subclass it and configure through `model_config`:

    * `resource_id_field` -- the id field for this resource ('id' by default)
    * `url` -- the base url of the resource (e.g. '/contacts');
      '/' + id is appended for individual resources (required)
    * `resource_name` -- the key wrapping the serialized data in this
      object's JSON representation (required only for serialization)
    * `resource_properties` -- the property names included in this object's
      JSON representation (required only for serialization)

    Because `resource_name` and `resource_properties` are only used for
    serialization, read-only resources can leave them out.

    Override any of `serialize()`, `serialize_property(prop)`,
    `deserialize(json)`, `deserialize_property(prop, value)` and
    `validate_resource()` to customize the wire format.
    """
    model_config = ResourceConfig(extra="allow",
                                  arbitrary_types_allowed=True,
                                  resource_id_field="id",
                                  url=None,
                                  resource_name=None,
                                  resource_properties=[],
                                  transport=None)

    id: Any = None
    state: Optional[ResourceState] = None

    _changes: Optional[PropertyChanges] = PrivateAttr(default=None)
    _adapter: Optional[ResourceAdapter] = PrivateAttr(default=None)
    _transport: Optional[Any] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        self._changes = PropertyChanges(self)
        self._adapter = ResourceAdapter(self)

    @classmethod
    def create(cls, transport: Optional['Transport'] = None, **data: Any) -> 'Resource':
        """Instantiate, optionally bound to a specific transport."""
        resource = cls(**data)
        if transport is not None:
            resource._transport = transport
        return resource

    # Configuration

    @classmethod
    def _get_config_value(cls, key: str, default=None):
        """Get configuration value from model_config."""
        value = cls.model_config.get(key)
        return default if value is None else value

    @classmethod
    def id_field(cls) -> str:
        return cls._get_config_value("resource_id_field", "id")

    @classmethod
    def base_url(cls) -> Optional[str]:
        return cls._get_config_value("url")

    @classmethod
    def resource_transport(cls) -> 'Transport':
        transport = cls._get_config_value("transport")
        if transport is None:
            from ..transport import get_default_transport
            transport = get_default_transport()
        return transport

    @property
    def resource_id_field(self) -> str:
        return self.id_field()

    @property
    def resource_url(self) -> Optional[str]:
        return self.base_url()

    @property
    def resource_name(self) -> Optional[str]:
        return self._get_config_value("resource_name")

    @property
    def resource_properties(self) -> List[str]:
        return list(self._get_config_value("resource_properties", []))

    def _request_transport(self) -> 'Transport':
        if self._transport is not None:
            return self._transport
        return self.resource_transport()

    # Change notification

    def subscribe(self, handler: ChangeHandler) -> ChangeHandler:
        """Call `handler(event)` after every (batched) change to this resource."""
        return self._changes.subscribe(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        self._changes.unsubscribe(handler)

    def begin_property_changes(self) -> None:
        self._changes.begin()

    def end_property_changes(self) -> None:
        self._changes.end()

    def property_changes(self):
        """Context manager grouping assignments into one notification."""
        return self._changes.batch()

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
            return

        previous = getattr(self, name, MISSING)
        super().__setattr__(name, value)
        if self._changes is not None:
            self._changes.record(name, previous, value)

    # Copying

    def duplicate_properties(self, source: 'Resource', props: Optional[Iterable[str]] = None) -> None:
        """
        Duplicate properties from another resource.

        Args:
            source: Resource to copy from
            props: Property names to copy; defaults to `resource_properties`
        """
        if props is None:
            props = self.resource_properties

        with self.property_changes():
            for prop in props:
                setattr(self, prop, getattr(source, prop, None))

    def copy_resource(self) -> 'Resource':
        """Create a copy of this resource, identity included."""
        duplicate = self.__class__.create(transport=self._transport)
        duplicate.duplicate_properties(self)
        setattr(duplicate, self.resource_id_field, self._resource_id())
        return duplicate

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        """Generate this resource's JSON representation."""
        return {self.resource_name: {prop: self.serialize_property(prop)
                                     for prop in self.resource_properties}}

    def serialize_property(self, prop: str) -> Any:
        return getattr(self, prop, None)

    def deserialize(self, json: Dict[str, Any]) -> 'Resource':
        """
        Set this resource's properties from JSON.

        Reads top-level keys (no `resource_name` wrapper). Observers receive a
        single notification covering every property set.
        """
        with self.property_changes():
            for prop, value in json.items():
                self.deserialize_property(prop, value)
        return self

    def deserialize_property(self, prop: str, value: Any) -> None:
        setattr(self, prop, value)

    def validate_resource(self) -> Any:
        """Return a truthy error to block `save_resource()`."""
        return None

    # Remote operations

    def save_resource(self) -> Deferred:
        """
        Create (if new) or update (if existing) this record.

        On success the response body is deserialized into this record, so
        server-assigned fields such as the id are populated.
        """
        error = self.validate_resource()
        if error:
            return Deferred.rejected(error)

        def update(json):
            if json:
                self.deserialize(json)

        method = "POST" if self.is_new() else "PUT"
        return self._resource_request(method, data=self.serialize()).done(update)

    def destroy_resource(self) -> Deferred:
        """Delete this record remotely. Local collections are left untouched."""
        return self._resource_request("DELETE")

    def is_new(self) -> bool:
        return self._resource_id() is None

    def _resource_request(self, method: str, data: Any = None) -> Deferred:
        return self._adapter.request(method, data=data)

    def _url(self) -> Optional[str]:
        url = self.resource_url
        if url is None:
            return None

        resource_id = self._resource_id()
        if resource_id is not None:
            url = f"{url}/{resource_id}"
        return url

    def _resource_id(self) -> Any:
        return getattr(self, self.resource_id_field, None)
