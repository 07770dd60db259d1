"""
StarREST Store

A named registry of collections for one application session.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Type, TYPE_CHECKING

from .core.collection import Collection
from .core.resource import Resource
from .errors import StoreError

if TYPE_CHECKING:
    from .transport import Transport

logger = logging.getLogger(__name__)


class Store:
    """
    Registry of collections by name.

    Collections can be registered explicitly, created through `collection()`
    (sharing the store's transport), or assigned as attributes::

        store = Store()
        store.contacts = Collection(Contact)
        store.contacts.find_all()
    """

    def __init__(self, transport: Optional['Transport'] = None):
        self.transport = transport
        self._collections: Dict[str, Collection] = {}

    def register(self, name: str, collection: Collection, replace: bool = False) -> Collection:
        """
        Register a collection under `name`.

        Raises:
            StoreError: If `name` is taken and `replace` is False
        """
        if name in self._collections and not replace:
            raise StoreError(f"Collection '{name}' is already registered")
        self._collections[name] = collection
        logger.debug(f"Registered collection '{name}' for {collection.model.__name__}")
        return collection

    def collection(self, name: str, model: Type[Resource], url: Optional[str] = None) -> Collection:
        """Create, register and return a collection of `model` records."""
        return self.register(name, Collection(model, url=url, transport=self.transport))

    def unregister(self, name: str) -> Collection:
        try:
            return self._collections.pop(name)
        except KeyError:
            raise StoreError(f"No collection named '{name}'") from None

    def get(self, name: str, default: Optional[Collection] = None) -> Optional[Collection]:
        return self._collections.get(name, default)

    def names(self) -> List[str]:
        return list(self._collections)

    def clear_all(self) -> None:
        """Clear every collection locally."""
        for collection in self._collections.values():
            collection.clear_all()

    def __getitem__(self, name: str) -> Collection:
        try:
            return self._collections[name]
        except KeyError:
            raise StoreError(f"No collection named '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __iter__(self) -> Iterator[str]:
        return iter(self._collections)

    def __len__(self) -> int:
        return len(self._collections)

    def __getattr__(self, name: str) -> Collection:
        collections = self.__dict__.get("_collections", {})
        if name in collections:
            return collections[name]
        raise AttributeError(f"{self.__class__.__name__} has no collection '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if isinstance(value, Collection) and not name.startswith("_"):
            self.register(name, value, replace=True)
        else:
            super().__setattr__(name, value)
