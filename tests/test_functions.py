"""Tests for the structural helpers."""

import pytest

from icestore import (
    CyclicStateError,
    EventStream,
    FrozenDict,
    FrozenList,
    FrozenStateError,
    SerializationError,
    StoreSubject,
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
from icestore.functions import default_memoization


class TestDeepFreeze:
    def test_freezes_nested_containers(self):
        frozen = deep_freeze({"a": {"b": [1, {"c": 2}]}})
        assert isinstance(frozen, FrozenDict)
        assert isinstance(frozen["a"], FrozenDict)
        assert isinstance(frozen["a"]["b"], FrozenList)
        assert isinstance(frozen["a"]["b"][1], FrozenDict)
        with pytest.raises(FrozenStateError):
            frozen["a"]["b"][1]["c"] = 3
        assert frozen == {"a": {"b": [1, {"c": 2}]}}

    def test_idempotent(self):
        frozen = deep_freeze({"a": [1]})
        assert deep_freeze(frozen) is frozen

    def test_primitives_pass_through(self):
        for value in (None, 1, 1.5, "s", True):
            assert deep_freeze(value) is value

    def test_does_not_touch_caller_value(self):
        original = {"a": [1]}
        deep_freeze(original)
        original["a"].append(2)  # still a plain list
        assert original == {"a": [1, 2]}

    def test_tuple_and_set(self):
        frozen = deep_freeze({"t": (1, 2), "s": {3}})
        assert frozen["t"] == [1, 2]
        assert isinstance(frozen["t"], FrozenList)
        assert frozen["s"] == frozenset({3})

    def test_shared_subtree_is_not_a_cycle(self):
        shared = {"x": 1}
        frozen = deep_freeze({"a": shared, "b": shared})
        assert frozen == {"a": {"x": 1}, "b": {"x": 1}}

    def test_cycle_raises(self):
        node = {}
        node["self"] = node
        with pytest.raises(CyclicStateError):
            deep_freeze(node)

    def test_cycle_is_a_serialization_error(self):
        items = []
        items.append(items)
        with pytest.raises(SerializationError):
            deep_freeze(items)

    def test_non_string_key_rejected(self):
        with pytest.raises(SerializationError):
            deep_freeze({"a": {1: "one"}})

    def test_frozen_input_with_mutable_children_is_impossible(self):
        frozen = deep_freeze(FrozenDict({"a": [1]}))
        with pytest.raises(FrozenStateError):
            frozen["a"].append(2)


class TestNaiveObjectComparison:
    def test_equal_values(self):
        assert naive_object_comparison({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]})

    def test_key_order_ignored(self):
        assert naive_object_comparison({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_different_values(self):
        assert not naive_object_comparison({"a": 1}, {"a": 2})
        assert not naive_object_comparison([1, 2], [2, 1])

    def test_frozen_and_plain_compare_equal(self):
        assert naive_object_comparison(deep_freeze({"a": [1]}), {"a": [1]})

    def test_callables_are_dropped(self):
        """Known limitation: states differing only in a callable compare equal."""
        assert naive_object_comparison({"a": 1, "cb": print}, {"a": 1, "cb": len})

    def test_unserializable_raises(self):
        with pytest.raises(SerializationError):
            naive_object_comparison({"a": object()}, {"a": 1})

    def test_circular_raises(self):
        node = {}
        node["self"] = node
        with pytest.raises(SerializationError):
            naive_object_comparison(node, {})


class TestDeepCopy:
    def test_round_trip(self):
        value = {"a": [1, {"b": "x"}], "n": None, "f": 1.5}
        assert deep_copy(value) == value

    def test_copy_is_independent(self):
        value = {"a": {"b": [1]}}
        clone = deep_copy(value)
        clone["a"]["b"].append(2)
        assert value == {"a": {"b": [1]}}

    def test_copy_of_frozen_is_mutable(self):
        clone = deep_copy(deep_freeze({"a": [1]}))
        assert type(clone) is dict
        assert type(clone["a"]) is list
        clone["a"].append(2)
        assert clone == {"a": [1, 2]}

    def test_lossy_conversions(self):
        assert deep_copy({"t": (1, 2), 1: "one"}) == {"t": [1, 2], "1": "one"}

    def test_unserializable_raises(self):
        with pytest.raises(SerializationError):
            deep_copy({"a": object()})


class TestShallowCopies:
    def test_copy_array(self):
        inner = {"x": 1}
        items = [inner]
        copied = copy_array(items)
        assert copied == items
        assert copied is not items
        assert copied[0] is inner

    def test_copy_object(self):
        inner = [1]
        obj = {"a": inner}
        copied = copy_object(obj)
        assert copied == obj
        assert copied is not obj
        assert copied["a"] is inner

    def test_copy_of_frozen_is_plain(self):
        copied = copy_object(deep_freeze({"a": 1}))
        copied["b"] = 2
        assert copied == {"a": 1, "b": 2}

    def test_none_passes_through(self):
        assert copy_array(None) is None
        assert copy_object(None) is None

    def test_empty_is_still_copied(self):
        items = []
        assert copy_array(items) is not items


class TestObjectIsEmpty:
    @pytest.mark.parametrize("value", [None, {}, [], "", 0, False, object()])
    def test_empty(self, value):
        assert object_is_empty(value)

    @pytest.mark.parametrize("value", [{"a": 1}, [0], "x"])
    def test_not_empty(self, value):
        assert not object_is_empty(value)

    def test_instance_with_attributes(self):
        class Thing:
            def __init__(self):
                self.name = "t"

        assert not object_is_empty(Thing())


class TestMergeDeep:
    def test_merges_nested_left_to_right(self):
        target = {"a": {"b": 1, "c": 2}}
        result = merge_deep(target, {"a": {"b": 3}}, {"a": {"d": 4}, "e": 5})
        assert result is target
        assert target == {"a": {"b": 3, "c": 2, "d": 4}, "e": 5}

    def test_later_source_wins(self):
        assert merge_deep({}, {"a": 1}, {"a": 2}) == {"a": 2}

    def test_lists_are_leaves(self):
        assert merge_deep({"l": [1, 2]}, {"l": [3]}) == {"l": [3]}

    def test_mapping_replaces_scalar_leaf(self):
        assert merge_deep({"a": 5}, {"a": {"b": 1}}) == {"a": {"b": 1}}

    def test_frozen_nested_target_is_copied(self):
        frozen_inner = deep_freeze({"x": 1})
        target = {"a": frozen_inner}
        merge_deep(target, {"a": {"y": 2}})
        assert target == {"a": {"x": 1, "y": 2}}
        assert frozen_inner == {"x": 1}

    def test_non_mapping_sources_skipped(self):
        assert merge_deep({"a": 1}, None, [1, 2], {"b": 2}) == {"a": 1, "b": 2}

    def test_no_sources(self):
        target = {"a": 1}
        assert merge_deep(target) is target


class TestIsObject:
    def test_mappings_only(self):
        assert is_object({})
        assert is_object(deep_freeze({"a": 1}))
        assert not is_object([])
        assert not is_object("s")
        assert not is_object(None)


class TestDefaultMemoization:
    def test_containers_compare_structurally(self):
        assert default_memoization({"a": [1]}, {"a": [1]})
        assert default_memoization([1, 2], (1, 2))
        assert not default_memoization({"a": 1}, {"a": 2})

    def test_primitives_compare_by_value(self):
        assert default_memoization(1, 1)
        assert default_memoization("x", "x")
        assert not default_memoization(1, 2)
        assert not default_memoization(None, {})

    def test_bool_and_int_differ(self):
        assert not default_memoization(1, True)
        assert not default_memoization(True, 1)
        assert not default_memoization(0, False)
        assert not default_memoization(1, 1.0)


class TestSelectStream:
    def test_maps_and_replays_current(self):
        subject = StoreSubject({"a": 1, "b": 1})
        selected = select_stream(subject, lambda s: s["a"])
        received = []
        selected.subscribe(received.append)
        assert received == [1]

    def test_drops_unchanged_results(self):
        subject = StoreSubject({"a": 1, "b": 1})
        selected = select_stream(subject, lambda s: s["a"])
        received = []
        selected.subscribe(received.append)
        subject.publish({"a": 1, "b": 2})
        subject.publish({"a": 2, "b": 2})
        assert received == [1, 2]

    def test_late_subscriber_gets_latest(self):
        subject = StoreSubject({"a": 1})
        selected = select_stream(subject, lambda s: s["a"])
        selected.subscribe(lambda v: None)
        subject.publish({"a": 2})
        subject.publish({"a": 3})
        late = []
        selected.subscribe(late.append)
        assert late == [3]

    def test_structural_dedup_of_containers(self):
        subject = StoreSubject({"user": {"name": "x"}, "n": 0})
        selected = select_stream(subject, lambda s: s["user"])
        received = []
        selected.subscribe(received.append)
        subject.publish({"user": {"name": "x"}, "n": 1})
        assert received == [{"name": "x"}]

    def test_custom_memoization(self):
        subject = StoreSubject({"a": 1})
        selected = select_stream(subject, lambda s: s["a"], lambda prev, curr: True)
        received = []
        selected.subscribe(received.append)
        subject.publish({"a": 2})
        assert received == [1]

    def test_lazy_until_subscribed(self):
        source = EventStream()
        calls = []
        select_stream(source, lambda v: calls.append(v) or v)
        source.emit(1)
        assert calls == []
        assert source.subscriber_count == 0
