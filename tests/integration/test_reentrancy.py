"""
Integration tests for listeners that mutate the set or its listeners while an
event is being delivered.
"""

import pytest

from obset import ObSet


@pytest.mark.integration
class TestListenerMutationDuringDispatch:
    def test_listener_removing_itself(self, counter):
        s = ObSet()

        def self_removing(value, operation, obset):
            counter(value, operation, obset)
            obset.off_operation("add", self_removing)

        s.on_operation("add", self_removing)
        s.add("a")
        s.add("b")

        assert counter.received == ["a"]

    def test_listener_removed_mid_pass_still_fires_in_that_pass(self):
        s = ObSet()
        order = []

        def second(value, operation, obset):
            order.append("second")

        def first(value, operation, obset):
            order.append("first")
            obset.off_operation("add", second)

        s.on_operation("add", first)
        s.on_operation("add", second)

        s.add("a")
        assert order == ["first", "second"]

        s.add("b")
        assert order == ["first", "second", "first"]

    def test_listener_added_mid_pass_waits_for_next_event(self):
        s = ObSet()
        order = []

        def late(value, operation, obset):
            order.append(("late", value))

        def registrar(value, operation, obset):
            order.append(("registrar", value))
            obset.on_operation("add", late)

        s.on_operation("add", registrar)

        s.add("a")
        assert order == [("registrar", "a")]

        s.add("b")
        assert order == [("registrar", "a"), ("registrar", "b"), ("late", "b")]

    def test_value_listener_added_by_operation_listener_fires_same_event(self, counter):
        """Scopes are frozen one at a time, the value scope after the operation scope."""
        s = ObSet()
        s.on_operation("add", lambda value, op, obset: obset.on_value("add", value, counter))

        s.add("a")
        assert counter.received == ["a"]

    def test_value_listener_freeing_its_own_storage_mid_pass(self, counter):
        s = ObSet()

        def leave(value, operation, obset):
            obset.off_value("add", "a", leave)

        s.on_value("add", "a", leave)
        s.on_value("add", "a", counter)

        s.add("a")
        assert counter.calls == 1
        assert s.has_value_listeners("a")

        s.off_value("add", "a", counter)
        assert not s.has_value_listeners("a")

    def test_once_listener_adding_to_the_set_fires_once(self, counter):
        s = ObSet()

        def cascade(value, operation, obset):
            counter(value, operation, obset)
            if value < 5:
                obset.add(value + 1)

        s.once_operation("add", cascade)
        s.add(0)

        assert counter.received == [0]
        assert sorted(s) == [0, 1]

    def test_persistent_listener_cascading_adds(self, counter):
        s = ObSet()

        def cascade(value, operation, obset):
            counter(value, operation, obset)
            if value < 5:
                obset.add(value + 1)

        s.on_operation("add", cascade)
        s.add(0)

        assert counter.received == [0, 1, 2, 3, 4, 5]
        assert sorted(s) == [0, 1, 2, 3, 4, 5]

    def test_remove_listener_removing_other_elements(self, event_log):
        s = ObSet(["a", "b", "c"])

        def domino(value, operation, obset):
            if value == "a":
                obset.remove("b")

        s.on_operation("remove", domino)
        event_log.attach(s)

        s.remove("a")
        assert s.snapshot() == ("c",)
        assert event_log.events == [("remove", "b"), ("remove", "a")]

    def test_clear_with_listener_emptying_the_set(self, event_log):
        s = ObSet(["a", "b", "c"])
        s.on_operation("remove", lambda value, op, obset: obset.remove("a"))
        event_log.attach(s)

        s.clear()
        assert s.is_empty
        assert [op for op, _ in event_log.events].count("empty") == 1

    def test_clear_with_listener_refilling(self):
        s = ObSet(["a", "b"])
        s.on_value("empty", "a", lambda value, op, obset: obset.add("phoenix"))

        s.clear()
        assert s.snapshot() == ("phoenix",)

    def test_remove_listener_refilling_suppresses_empty(self, event_log):
        s = ObSet(["a"])
        s.on_operation("remove", lambda value, op, obset: obset.add("b") if value == "a" else None)
        event_log.attach(s)

        s.remove("a")
        # "b" arrived before the emptiness check
        assert event_log.events == [("add", "b"), ("remove", "a")]

    def test_full_listener_making_room(self, event_log):
        s = ObSet(capacity=2)
        s.on_operation("full", lambda value, op, obset: obset.remove(value))
        event_log.attach(s)

        s.add("a")
        s.add("b")
        assert s.snapshot() == ("a",)
        assert event_log.events == [("add", "a"), ("add", "b"), ("remove", "b"), ("full", "b")]
