"""
Deferred Results

A Deferred represents the outcome of a resource request. Callbacks are
registered with `done`, `fail` and `always` and run in registration order
once the outcome is known (immediately if it already is). A Deferred can also
be awaited from a coroutine.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List

from ..errors import ResourceValidationError

logger = logging.getLogger(__name__)


class DeferredState(str, Enum):
    """Lifecycle of a Deferred."""
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Deferred:
    """
    Pending or settled outcome of an asynchronous request.

    Settling is one-way: once resolved or rejected, later calls to
    `resolve`/`reject` are ignored.
    """

    def __init__(self):
        self._state = DeferredState.PENDING
        self._value: Any = None
        self._traceback = None
        self._done_callbacks: List[Callable[[Any], Any]] = []
        self._fail_callbacks: List[Callable[[Any], Any]] = []
        self._always_callbacks: List[Callable[[], Any]] = []

    @classmethod
    def resolved(cls, value: Any = None) -> 'Deferred':
        """Create an already-resolved Deferred."""
        deferred = cls()
        deferred.resolve(value)
        return deferred

    @classmethod
    def rejected(cls, error: Any) -> 'Deferred':
        """Create an already-rejected Deferred."""
        deferred = cls()
        deferred.reject(error)
        return deferred

    @property
    def state(self) -> DeferredState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is DeferredState.PENDING

    @property
    def value(self) -> Any:
        """Resolution value or rejection error (None while pending)."""
        return self._value

    def resolve(self, value: Any = None) -> None:
        if not self.is_pending:
            return
        self._state = DeferredState.RESOLVED
        self._value = value
        self._settle(self._done_callbacks)

    def reject(self, error: Any) -> None:
        if not self.is_pending:
            return
        self._state = DeferredState.REJECTED
        self._value = error
        self._traceback = getattr(error, "__traceback__", None)
        self._settle(self._fail_callbacks)

    def done(self, callback: Callable[[Any], Any]) -> 'Deferred':
        """Run `callback(value)` on success."""
        if self.is_pending:
            self._done_callbacks.append(callback)
        elif self._state is DeferredState.RESOLVED:
            self._run(callback, self._value)
        return self

    def fail(self, callback: Callable[[Any], Any]) -> 'Deferred':
        """Run `callback(error)` on failure."""
        if self.is_pending:
            self._fail_callbacks.append(callback)
        elif self._state is DeferredState.REJECTED:
            self._run(callback, self._value)
        return self

    def always(self, callback: Callable[[], Any]) -> 'Deferred':
        """Run `callback()` once settled, whatever the outcome."""
        if self.is_pending:
            self._always_callbacks.append(callback)
        else:
            self._run(callback)
        return self

    def _settle(self, callbacks: List[Callable]) -> None:
        for callback in callbacks:
            self._run(callback, self._value)
        for callback in self._always_callbacks:
            self._run(callback)
        self._done_callbacks.clear()
        self._fail_callbacks.clear()
        self._always_callbacks.clear()

    def _run(self, callback: Callable, *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Deferred callback {callback!r} raised")

    async def _wait(self) -> Any:
        if self.is_pending:
            future = asyncio.get_running_loop().create_future()
            self.always(lambda: future.done() or future.set_result(None))
            await future

        if self._state is DeferredState.REJECTED:
            if isinstance(self._value, BaseException):
                # Same traceback on every await
                raise self._value.with_traceback(self._traceback)
            raise ResourceValidationError(self._value)
        return self._value

    def __await__(self):
        return self._wait().__await__()

    def __repr__(self) -> str:
        return f"Deferred({self._state.value})"
