"""Exception hierarchy for icestore."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all icestore errors."""


class SerializationError(StoreError):
    """A state value could not be serialized or deserialized."""


class CyclicStateError(SerializationError):
    """A state value references itself. Snapshots must be acyclic."""


class FrozenStateError(StoreError, TypeError):
    """Attempted in-place mutation of a frozen snapshot."""


class InvalidSelectorError(StoreError, TypeError):
    """select() received something that is neither a function nor a key."""
