"""icestore: reactive immutable state store for UI components."""

from importlib.metadata import version as _version

__version__ = _version("icestore")

from icestore.errors import (
    CyclicStateError,
    FrozenStateError,
    InvalidSelectorError,
    SerializationError,
    StoreError,
)
from icestore.frozen import FrozenDict, FrozenList
from icestore.functions import (
    copy_array,
    copy_object,
    deep_copy,
    deep_freeze,
    is_object,
    merge_deep,
    naive_object_comparison,
    object_is_empty,
    select_stream,
)
from icestore.stream import EventStream, ReplayStream, Stream
from icestore.subject import StoreSubject, set_scheduler
from icestore.store import PropertyActuator, PropertySelector, ReactiveStore, Store
# textual is not auto-imported: opt-in only

__all__ = [
    "Store",
    "ReactiveStore",
    "PropertySelector",
    "PropertyActuator",
    "StoreSubject",
    "set_scheduler",
    "Stream",
    "EventStream",
    "ReplayStream",
    "FrozenDict",
    "FrozenList",
    "copy_array",
    "copy_object",
    "deep_copy",
    "deep_freeze",
    "is_object",
    "merge_deep",
    "naive_object_comparison",
    "object_is_empty",
    "select_stream",
    "StoreError",
    "SerializationError",
    "CyclicStateError",
    "FrozenStateError",
    "InvalidSelectorError",
]
