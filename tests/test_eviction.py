"""Tests for bounded sets and FIFO/LIFO replacement."""

import logging

import pytest

from obset import InvariantViolation, ObSet, ReplacementPolicy


def test_fifo_evicts_oldest_member(event_log):
    s = event_log.attach(ObSet(capacity=2, replacement_policy="fifo"))
    s.add("a")
    s.add("b")
    s.add("c")

    assert set(s) == {"b", "c"}
    assert event_log.events == [
        ("add", "a"),
        ("add", "b"),
        ("full", "b"),
        ("remove", "a"),
        ("add", "c"),
        ("full", "c"),
    ]


def test_lifo_evicts_newest_member(event_log):
    s = event_log.attach(ObSet(capacity=2, replacement_policy=ReplacementPolicy.LIFO))
    s.add("a")
    s.add("b")
    s.add("c")

    assert set(s) == {"a", "c"}
    assert event_log.events[3] == ("remove", "b")


def test_adding_present_value_to_full_set_evicts_nothing(event_log):
    s = event_log.attach(ObSet(capacity=2))
    s.add("a")
    s.add("b")
    event_log.clear()

    assert not s.add("a")
    assert set(s) == {"a", "b"}
    assert event_log.events == []


def test_capacity_one_eviction_fires_empty(event_log):
    s = event_log.attach(ObSet(capacity=1))
    s.add("a")
    s.add("b")

    assert s.snapshot() == ("b",)
    assert event_log.events == [
        ("add", "a"),
        ("full", "a"),
        ("remove", "a"),
        ("empty", "a"),
        ("add", "b"),
        ("full", "b"),
    ]


def test_fifo_eviction_storm():
    """Consecutive evictions keep following insertion order."""
    s = ObSet(capacity=3)
    for value in range(10):
        s.add(value)
    assert set(s) == {7, 8, 9}


def test_lifo_eviction_storm():
    s = ObSet(capacity=3, replacement_policy="lifo")
    for value in range(10):
        s.add(value)
    assert set(s) == {0, 1, 9}


def test_fifo_skips_explicitly_removed_members():
    s = ObSet(capacity=3)
    for value in "abc":
        s.add(value)
    s.remove("a")
    s.add("d")  # not full yet, nothing evicted
    s.add("e")  # evicts "b", now the oldest

    assert set(s) == {"c", "d", "e"}


def test_lifo_after_removing_newest():
    s = ObSet(capacity=3, replacement_policy="lifo")
    for value in "abc":
        s.add(value)
    s.remove("c")
    s.add("d")
    s.add("e")  # evicts "d"

    assert set(s) == {"a", "b", "e"}


def test_readding_evicted_value_counts_as_new_insertion():
    s = ObSet(capacity=2)
    s.add("a")
    s.add("b")
    s.add("c")  # evicts a
    s.add("a")  # evicts b
    s.add("d")  # evicts c

    assert set(s) == {"a", "d"}


def test_preseeded_values_take_part_in_eviction_order():
    s = ObSet(["x", "y"], capacity=2)
    s.add("z")
    assert set(s) == {"y", "z"}


def test_eviction_is_logged(caplog):
    s = ObSet(capacity=1)
    s.add("a")
    with caplog.at_level(logging.DEBUG):
        s.add("b")
    assert "Evicting 'a' (fifo) at capacity 1" in caplog.text


def test_full_event_fires_on_every_insertion_at_capacity(counter):
    s = ObSet(capacity=2)
    s.on_operation("full", counter)
    for value in range(5):
        s.add(value)
    assert counter.received == [1, 2, 3, 4]


def test_eviction_that_frees_no_slot_is_fatal():
    """A remove listener refilling the set breaks the eviction contract."""
    s = ObSet(capacity=2)
    s.add("a")
    s.add("b")

    def refill(value, operation, obset):
        if value == "a":
            obset.add("intruder")

    s.on_operation("remove", refill)

    with pytest.raises(InvariantViolation, match="did not free a slot"):
        s.add("c")
    assert "c" not in s


def test_stale_eviction_victim_is_fatal():
    s = ObSet(capacity=1)
    s.add("a")
    s._recency.clear()
    s._recency.push("ghost")

    with pytest.raises(InvariantViolation, match="not a member"):
        s.add("b")


def test_remove_listener_admitting_incoming_value_during_eviction():
    s = ObSet(capacity=2)
    s.add("a")
    s.add("b")

    def admit(value, operation, obset):
        if value == "a":
            obset.add("c")

    s.on_operation("remove", admit)

    assert s.add("c") is False
    assert set(s) == {"b", "c"}
    assert s.is_full
