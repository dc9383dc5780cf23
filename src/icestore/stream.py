"""Push-based streams with operator chaining.

Minimal reactive runtime for store subscriptions. EventStream is the hot,
multicast source: emit a value and every subscriber sees it synchronously,
in subscription order. Operators (map/filter/distinct) return cold streams:
each subscribe() wires its own path back to the source, so per-subscription
state such as the last value seen by distinct() is never shared. replay()
is the one sharing point: it holds a single upstream connection while it has
subscribers and hands the latest value to late ones.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Disposer = Callable[[], None]
Comparer = Callable[[T, T], bool]

_UNSET = object()


def _noop() -> None:
    pass


def _same(previous, current) -> bool:
    return previous is current or previous == current


class Stream(Generic[T]):
    """Anything that can be subscribed to, plus the operator chain."""

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        raise NotImplementedError

    def map(self, fn: Callable[[T], U]) -> Stream[U]:
        """Transform values through fn."""
        return DerivedStream(lambda cb: self.subscribe(lambda v: cb(fn(v))))

    def filter(self, fn: Callable[[T], bool]) -> Stream[T]:
        """Only pass values where fn returns True."""
        return DerivedStream(lambda cb: self.subscribe(lambda v: cb(v) if fn(v) else None))

    def distinct(self, comparer: Comparer | None = None) -> Stream[T]:
        """Drop a value when comparer(previous, value) says it is unchanged."""
        compare = comparer or _same

        def _on_subscribe(cb: Callable[[T], None]) -> Disposer:
            last = [_UNSET]

            def _on_value(value: T) -> None:
                if last[0] is not _UNSET and compare(last[0], value):
                    return
                last[0] = value
                cb(value)

            return self.subscribe(_on_value)

        return DerivedStream(_on_subscribe)

    def replay(self) -> ReplayStream[T]:
        """Share one upstream connection and replay the latest value."""
        return ReplayStream(self)


class DerivedStream(Stream[T]):
    """Cold stream: subscribing runs on_subscribe, which subscribes upstream."""

    __slots__ = ("_on_subscribe",)

    def __init__(self, on_subscribe: Callable[[Callable[[T], None]], Disposer]) -> None:
        self._on_subscribe = on_subscribe

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        return self._on_subscribe(callback)


class EventStream(Stream[T]):
    """Hot multicast stream."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, value: T) -> None:
        """Push a value to all subscribers."""
        if self._disposed:
            return
        # Copy: callbacks may unsubscribe themselves mid-emit.
        for cb in list(self._subscribers):
            cb(value)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        if self._disposed:
            return _noop
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def dispose(self) -> None:
        """Drop every subscriber. Later emits and subscribes are no-ops."""
        self._disposed = True
        self._subscribers.clear()


class ReplayStream(EventStream[T]):
    """Shares one upstream connection and caches the latest value.

    Connects on the first subscribe and disconnects when the last subscriber
    leaves, dropping the cache. A behavior source replays its current value
    on reconnect, so nothing is lost.
    """

    def __init__(self, source: Stream[T]) -> None:
        super().__init__()
        self._source = source
        self._upstream: Disposer | None = None
        self._latest: object = _UNSET

    @property
    def connected(self) -> bool:
        return self._upstream is not None

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        unsubscribe = super().subscribe(callback)
        if self._disposed:
            return unsubscribe
        if self._upstream is None:
            # Placeholder first: a behavior source answers synchronously, and a
            # callback may subscribe again from inside that first emission.
            self._upstream = _noop
            upstream = self._source.subscribe(self._on_value)
            if self._subscribers:
                self._upstream = upstream
            else:
                # Every subscriber left during the first emission.
                upstream()
        elif self._latest is not _UNSET:
            callback(self._latest)

        def _release() -> None:
            unsubscribe()
            if not self._subscribers:
                self._disconnect()

        return _release

    def _on_value(self, value: T) -> None:
        self._latest = value
        self.emit(value)

    def _disconnect(self) -> None:
        if self._upstream is not None:
            upstream, self._upstream = self._upstream, None
            upstream()
        self._latest = _UNSET

    def dispose(self) -> None:
        super().dispose()
        self._disconnect()
