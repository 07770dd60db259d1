"""
Property Change Notification

Explicit change tracking for resources and collections. Assignments made
outside a batch are published one by one; assignments made between
`begin()` and `end()` are consolidated into a single ChangeEvent published
when the outermost batch ends.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List

logger = logging.getLogger(__name__)

MISSING = object()


@dataclass
class ChangeEvent:
    """One consolidated notification: field name -> new / previous value."""
    source: Any
    changes: Dict[str, Any]
    previous: Dict[str, Any] = field(default_factory=dict)

    @property
    def fields(self) -> List[str]:
        return list(self.changes)


ChangeHandler = Callable[[ChangeEvent], None]


class PropertyChanges:
    """
    Subscriber list plus batching state for one observable object.

    Handlers are plain callables receiving a ChangeEvent. A handler that
    raises is logged and does not prevent the others from running.
    """

    def __init__(self, source: Any = None):
        self.source = source
        self._subscribers: List[ChangeHandler] = []
        self._depth = 0
        self._pending: Dict[str, Any] = {}
        self._previous: Dict[str, Any] = {}

    def subscribe(self, handler: ChangeHandler) -> ChangeHandler:
        self._subscribers.append(handler)
        return handler

    def unsubscribe(self, handler: ChangeHandler) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def clear_subscribers(self) -> None:
        self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def in_batch(self) -> bool:
        return self._depth > 0

    def begin(self) -> None:
        self._depth += 1

    def end(self) -> None:
        if self._depth == 0:
            raise RuntimeError("end() called without a matching begin()")
        self._depth -= 1
        if self._depth == 0:
            self._flush()

    @contextmanager
    def batch(self) -> Iterator['PropertyChanges']:
        self.begin()
        try:
            yield self
        finally:
            self.end()

    def record(self, name: str, previous: Any, value: Any) -> None:
        """Note that `name` changed from `previous` to `value`."""
        if self._depth:
            self._previous.setdefault(name, previous)
            self._pending[name] = value
            return

        if _same(previous, value):
            return
        self._publish({name: value}, {name: previous})

    def _flush(self) -> None:
        changes = {}
        previous = {}
        for name, value in self._pending.items():
            before = self._previous.get(name, MISSING)
            if not _same(before, value):
                changes[name] = value
                previous[name] = before
        self._pending.clear()
        self._previous.clear()

        if changes:
            self._publish(changes, previous)

    def _publish(self, changes: Dict[str, Any], previous: Dict[str, Any]) -> None:
        previous = {k: (None if v is MISSING else v) for k, v in previous.items()}
        event = ChangeEvent(source=self.source, changes=changes, previous=previous)
        for handler in list(self._subscribers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Change handler {handler!r} raised for {event.fields}")


def _same(previous: Any, value: Any) -> bool:
    if previous is MISSING:
        return False
    try:
        return bool(previous == value)
    except Exception:
        return previous is value
