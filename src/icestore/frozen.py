"""Frozen containers — the immutable form of a published snapshot.

Python dicts and lists cannot be frozen in place, so freeze() rebuilds
them as FrozenDict / FrozenList. Both subclass the builtin, so reads, ==,
iteration and json serialization behave exactly like the plain container.
Every mutator raises FrozenStateError and leaves the value untouched.

Constructing either container freezes its children too, so a FrozenDict is
frozen all the way down no matter who built it. Snapshot keys are strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NoReturn, TypeVar

from icestore.errors import CyclicStateError, FrozenStateError, SerializationError

T = TypeVar("T")


def _refuse(self, *args, **kwargs) -> NoReturn:
    raise FrozenStateError(f"{type(self).__name__} is frozen; publish a new state instead")


class FrozenDict(dict):
    """Read-only dict with string keys."""

    __slots__ = ()

    def __init__(self, *args, **kwargs) -> None:
        dict.__init__(self, *args, **kwargs)
        for key, value in dict.items(self):
            if not isinstance(key, str):
                raise SerializationError(f"state keys must be strings, got {key!r}")
            if not is_frozen(value):
                dict.__setitem__(self, key, freeze(value))

    __setitem__ = _refuse
    __delitem__ = _refuse
    __ior__ = _refuse
    clear = _refuse
    pop = _refuse
    popitem = _refuse
    setdefault = _refuse
    update = _refuse

    def __reduce__(self):
        return (type(self), (dict(self),))

    def __repr__(self) -> str:
        return f"FrozenDict({dict.__repr__(self)})"


class FrozenList(list):
    """Read-only list."""

    __slots__ = ()

    def __init__(self, items=()) -> None:
        list.__init__(self, (freeze(item) for item in items))

    __setitem__ = _refuse
    __delitem__ = _refuse
    __iadd__ = _refuse
    __imul__ = _refuse
    append = _refuse
    extend = _refuse
    insert = _refuse
    pop = _refuse
    remove = _refuse
    clear = _refuse
    sort = _refuse
    reverse = _refuse

    def __reduce__(self):
        return (type(self), (list(self),))

    def __repr__(self) -> str:
        return f"FrozenList({list.__repr__(self)})"


def is_frozen(value: object) -> bool:
    return isinstance(value, (FrozenDict, FrozenList, frozenset))


def freeze(value: T) -> T:
    """Frozen equivalent of value; frozen values and primitives come back as-is.

    Children are frozen before their parent is built, so the container
    constructors find nothing left to do. Raises CyclicStateError on a cycle.
    """
    active: set[int] = set()

    def _freeze(item):
        if is_frozen(item):
            return item
        if isinstance(item, Mapping):
            return _enter(item, lambda: FrozenDict({k: _freeze(v) for k, v in item.items()}))
        if isinstance(item, (list, tuple)):
            return _enter(item, lambda: FrozenList([_freeze(v) for v in item]))
        if isinstance(item, set):
            return frozenset(item)
        return item

    def _enter(item, build):
        key = id(item)
        if key in active:
            raise CyclicStateError(f"cycle detected at {type(item).__name__} {key:#x}")
        active.add(key)
        try:
            return build()
        finally:
            active.discard(key)

    return _freeze(value)
