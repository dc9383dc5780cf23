"""StoreSubject — the single-value broadcast channel behind every Store.

Behaves like a behavior subject with two extra rules on publish:
1. the value is deep-frozen before anyone can see it
2. a value structurally equal to the current one is dropped entirely

Thread safety: call set_scheduler() once from the UI thread. After that,
any publish() from a background thread is handed to the scheduler instead
of running in place. UI-thread publishes remain synchronous.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, TypeVar

from icestore.functions import deep_freeze, naive_object_comparison
from icestore.stream import Disposer, EventStream, Stream, DerivedStream

logger = logging.getLogger("icestore.subject")

T = TypeVar("T")

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread publishes.

    Call once from the main/UI thread:
        icestore.set_scheduler(app.call_from_thread)

    Pass None to go back to publishing in place on every thread.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


class StoreSubject(EventStream[T]):
    """Current snapshot + subscribers. Subscribing replays the current value.

    A publish made by a subscriber while a value is being broadcast is queued
    and applied once that broadcast finishes, so every subscriber sees values
    in publish order and the last value seen is always current_value().
    """

    def __init__(self, initial_data: T) -> None:
        super().__init__()
        self._value: T = deep_freeze(initial_data)
        self._version = 0
        self._queue: deque = deque()
        self._draining = False

    @property
    def version(self) -> int:
        """Number of distinct values published since construction."""
        return self._version

    def current_value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        unsubscribe = super().subscribe(callback)
        if not self._disposed:
            callback(self._value)
        return unsubscribe

    def publish(self, new_data: T) -> None:
        """Freeze and broadcast new_data unless it equals the current value."""
        if _scheduler is not None and threading.current_thread() != _scheduler_thread:
            _scheduler(lambda v=new_data: self._publish_direct(v))
        else:
            self._publish_direct(new_data)

    def _publish_direct(self, new_data: T) -> None:
        self._queue.append(deep_freeze(new_data))
        if self._draining:
            # Published from inside a subscriber: runs after the current fan-out.
            return
        self._draining = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._draining = False
            self._queue.clear()

    def _apply(self, frozen: T) -> None:
        if naive_object_comparison(frozen, self._value):
            logger.debug("Skipped publish: state unchanged at version %d", self._version)
            return
        self._value = frozen
        self._version += 1
        logger.debug(
            "Published version %d to %d subscribers", self._version, len(self._subscribers)
        )
        self.emit(frozen)

    def as_stream(self) -> Stream[T]:
        """Subscribe-only view; holders of it cannot publish."""
        return DerivedStream(self.subscribe)

    def __repr__(self) -> str:
        return f"StoreSubject(version={self._version}, value={self._value!r})"
