"""Structural helpers — freeze, copy, compare and merge plain state trees.

Snapshots are JSON-shaped values: dicts with string keys, lists, strings,
numbers, booleans and None. Comparison and deep copy go through a json
round-trip, which is simple and fast but lossy:

- callables serialize as null, so two states that differ only in a callable
  compare equal and a deep copy replaces the callable with None
- tuples and sets come back as lists, non-string dict keys come back as strings
- anything else json cannot represent, and any cycle, raises SerializationError
"""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, TypeVar

from icestore.errors import SerializationError
from icestore.frozen import FrozenDict, freeze
from icestore.stream import Stream

T = TypeVar("T")
R = TypeVar("R")

MappingFunction = Callable[[T], R]
MemoizationFunction = Callable[[R, R], bool]


def deep_freeze(value: T) -> T:
    """Return value with every reachable dict/list replaced by its frozen form.

    Primitives and already-frozen containers come back as the same object,
    so freezing twice is free. Raises CyclicStateError on self-reference and
    SerializationError on a non-string dict key.
    """
    return freeze(value)


def _json_default(value: object) -> object:
    if callable(value):
        return None
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dumps(value: object, *, sort_keys: bool) -> str:
    try:
        return json.dumps(value, default=_json_default, sort_keys=sort_keys)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc


def naive_object_comparison(first: object, second: object) -> bool:
    """True iff both values serialize to the same JSON text.

    Keys are sorted, so dict insertion order never matters.
    """
    return _dumps(first, sort_keys=True) == _dumps(second, sort_keys=True)


def deep_copy(value: T) -> T:
    """Fully independent, unfrozen clone via a json round-trip."""
    text = _dumps(value, sort_keys=False)
    try:
        return json.loads(text)
    except ValueError as exc:
        raise SerializationError(str(exc)) from exc


def copy_array(items: list[T] | None) -> list[T] | None:
    """Shallow list copy. None passes through."""
    return list(items) if items is not None else items


def copy_object(obj: Mapping | None) -> dict | None:
    """Shallow dict copy. None passes through."""
    return dict(obj) if obj is not None else obj


def object_is_empty(value: object) -> bool:
    """True for falsy values and for objects with nothing in them.

    Useful where {} must count as empty alongside None and "".
    """
    if not value:
        return True
    if isinstance(value, (Mapping, list, tuple, str)):
        return len(value) == 0
    return not getattr(value, "__dict__", None)


def is_object(item: object) -> bool:
    """Mapping check. Lists and primitives are leaves."""
    return isinstance(item, Mapping)


def merge_deep(target: MutableMapping, *sources: Mapping) -> MutableMapping:
    """Recursively merge sources into target, left to right. Returns target.

    Nested mappings merge key by key; everything else (lists included) is a
    leaf and replaced wholesale. Sources that are not mappings are skipped.
    """
    if not is_object(target):
        return target
    for source in sources:
        if not is_object(source):
            continue
        for key, incoming in source.items():
            if is_object(incoming):
                existing = target.get(key)
                if not is_object(existing):
                    target[key] = {}
                elif isinstance(existing, FrozenDict):
                    target[key] = dict(existing)
                merge_deep(target[key], incoming)
            else:
                target[key] = incoming
    return target


def default_memoization(previous: Any, current: Any) -> bool:
    """Structural comparison for containers, typed equality for the rest.

    1 and True are equal in Python but not in the state, so the types must match.
    """
    if isinstance(previous, (Mapping, list, tuple)) and isinstance(current, (Mapping, list, tuple)):
        return naive_object_comparison(previous, current)
    return previous is current or (type(previous) is type(current) and previous == current)


def select_stream(
    source: Stream[T],
    mapping_function: MappingFunction[T, R],
    memoization_function: MemoizationFunction[R] | None = None,
) -> Stream[R]:
    """Map a state stream, drop unchanged results, replay the latest.

    Usage:
        titles = select_stream(store.state_stream, lambda s: s["title"])
        titles.subscribe(print)  # prints the current title right away
    """
    return (
        source.map(mapping_function)
        .distinct(memoization_function or default_memoization)
        .replay()
    )
