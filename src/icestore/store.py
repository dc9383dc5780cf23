"""Store — one frozen state tree with lens-style property access.

A Store owns a StoreSubject. Components read the snapshot synchronously
through .state or subscribe to .state_stream, and write either the whole
state, a shallow root-level patch, or a single nested property through a
PropertyActuator:

    store = Store({"user": {"name": "x", "tags": []}})
    name = store.select_by_fn(lambda s: s["user"]).property("name")
    name.get_current()      # "x"
    name.set_value("y")     # publishes a new root, old snapshots untouched
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Callable, Generic, TypeVar

from icestore.errors import InvalidSelectorError, StoreError
from icestore.functions import deep_copy, select_stream
from icestore.stream import Stream
from icestore.subject import StoreSubject

logger = logging.getLogger("icestore.store")

T = TypeVar("T")
R = TypeVar("R")
V = TypeVar("V")

ModelSelector = Callable[[T], R]
PropertyModifier = Callable[[V], V]
PropertySetter = Callable[[V], V]


def _identity(value):
    return value


def _read_property(model: Any, key: Any) -> Any:
    """model[key] for mappings and lists. Missing key or other model -> None."""
    if isinstance(model, Mapping):
        return model.get(key)
    if isinstance(model, Sequence) and not isinstance(model, (str, bytes)):
        if isinstance(key, int) and -len(model) <= key < len(model):
            return model[key]
    return None


def _writable(model: Any, key: Any) -> bool:
    """Can model[key] be assigned? Lists only take existing indexes."""
    if isinstance(model, MutableMapping):
        return True
    if isinstance(model, MutableSequence):
        return isinstance(key, int) and -len(model) <= key < len(model)
    return False


def _is_key(arg: object) -> bool:
    return arg is not None and not callable(arg) and isinstance(arg, Hashable)


class PropertyActuator(Generic[T, V]):
    """get/set/observe one property of one selected sub-model.

    Holds no state: every call resolves the sub-model from the store's
    *current* root, so an actuator fetched long ago is never stale.
    If the sub-model is absent (None) or is not a dict or list, reads give
    None and writes do nothing.
    """

    __slots__ = ("_store", "_model_selector", "_key")

    def __init__(self, store: Store[T], model_selector: ModelSelector[T, Any], key: Any) -> None:
        self._store = store
        self._model_selector = model_selector
        self._key = key

    def _resolve(self, root: T) -> Any:
        parent = self._model_selector(root)
        return _read_property(parent, self._key) if parent is not None else None

    def set(self, setter: PropertySetter[V]) -> None:
        """Replace the property with setter(current value).

        Works on a deep copy of the root so no frozen snapshot is touched,
        then publishes the copy as the new whole state.
        """
        root = deep_copy(self._store.state)
        parent = self._model_selector(root)
        if parent is None:
            logger.debug("Skipped set of %r: sub-model absent", self._key)
            return
        if not _writable(parent, self._key):
            logger.debug("Skipped set of %r: not a property of %s", self._key, type(parent).__name__)
            return
        parent[self._key] = setter(_read_property(parent, self._key))
        if isinstance(root, Mapping):
            self._store.set_state(root)
        else:
            self._store.state = root

    def set_value(self, new_value: V) -> None:
        self.set(lambda _: new_value)

    def set_partial(self, updates: Mapping) -> None:
        """Shallow-merge updates into the current property value.

        The property must hold a mapping or nothing; anything else raises
        StoreError and leaves the state unchanged.
        """

        def _merge(current):
            if current is not None and not isinstance(current, Mapping):
                raise StoreError(
                    f"set_partial needs a mapping at {self._key!r}, found {type(current).__name__}"
                )
            return {**(current or {}), **updates}

        self.set(_merge)

    def get_current(self, modifier: PropertyModifier[V] | None = None) -> V | None:
        parent = self._model_selector(self._store.state)
        if parent is None:
            return None
        return (modifier or _identity)(_read_property(parent, self._key))

    def observable(self, modifier: PropertyModifier[V] | None = None) -> Stream[V]:
        """Stream of the property's value, deduplicated, current value first."""
        stream = select_stream(self._store.state_stream, self._resolve)
        return stream.map(modifier or _identity)

    def __repr__(self) -> str:
        return f"PropertyActuator({self._key!r})"


class PropertySelector(Generic[T, R]):
    """A named sub-model of the state. property(key) yields its actuator."""

    __slots__ = ("_store", "_model_selector")

    def __init__(self, store: Store[T], model_selector: ModelSelector[T, R]) -> None:
        self._store = store
        self._model_selector = model_selector

    def property(self, key: Any) -> PropertyActuator[T, Any]:
        return PropertyActuator(self._store, self._model_selector, key)


class Store(Generic[T]):
    """Single source of truth for one state slice.

    Subclass it to declare a slice and its initial state, then construct it
    in the component that owns the slice and pass it to consumers:

        class ClubStore(Store):
            def __init__(self):
                super().__init__({"title": "Walker Bay Boat & Ski-boat Club"})
    """

    def __init__(self, initial_state: T) -> None:
        self._state: StoreSubject[T] = StoreSubject(initial_state)
        self.state_stream: Stream[T] = self._state.as_stream()

    @property
    def state(self) -> T:
        """The current frozen snapshot."""
        return self._state.current_value()

    @state.setter
    def state(self, next_state: T) -> None:
        self._state.publish(next_state)

    @property
    def version(self) -> int:
        return self._state.version

    def set_state(self, partial_state: Mapping) -> None:
        """Overwrite the given top-level keys; everything else is kept.

        The merge is shallow: a nested dict in partial_state replaces the
        old one wholesale rather than merging into it.
        """
        self.state = {**self.state, **partial_state}

    def get_partial_state(self, attribute: Any) -> Any:
        return _read_property(self.state, attribute)

    def select_by_fn(self, model_selector: ModelSelector[T, R]) -> PropertySelector[T, R]:
        if not callable(model_selector):
            raise InvalidSelectorError(
                f"model selector must be callable, got {type(model_selector).__name__}"
            )
        return PropertySelector(self, model_selector)

    def select_by_key(self, key: Any) -> Stream[Any]:
        """Stream of one top-level property."""
        if not _is_key(key):
            raise InvalidSelectorError(f"not a state key: {key!r}")
        return select_stream(self.state_stream, lambda state: _read_property(state, key))

    def select(self, arg):
        """select_by_fn for callables, select_by_key for keys."""
        if callable(arg):
            return self.select_by_fn(arg)
        if _is_key(arg):
            return self.select_by_key(arg)
        raise InvalidSelectorError(
            f"select() takes a model selector function or a state key, got {type(arg).__name__}"
        )

    def select_root(self) -> PropertySelector[T, T]:
        """Selector over the whole state, so top-level keys get actuators too."""
        return self.select_by_fn(_identity)

    def select_current(self, attribute: Any) -> Any:
        return self.select_root().property(attribute).get_current()

    def dispose(self) -> None:
        """Stop notifying every subscriber. The last state stays readable."""
        self._state.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.state!r})"


class ReactiveStore(Generic[T]):
    """Holder of a Store that starts empty and grows key by key."""

    def __init__(self) -> None:
        self.store: Store[dict[str, Any]] = Store({})
