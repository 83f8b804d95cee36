"""
Shared pytest fixtures and configuration for ObSet tests.
"""

import pytest


class EventLog:
    """Listener that records every (operation, value) it is called with."""

    def __init__(self):
        self.events = []

    def __call__(self, value, operation, obset):
        self.events.append((operation.value, value))

    def attach(self, obset):
        for operation in ("add", "remove", "empty", "full"):
            obset.on_operation(operation, self)
        return obset

    def clear(self):
        self.events.clear()


@pytest.fixture
def event_log():
    """Provide a fresh recording listener."""
    return EventLog()


@pytest.fixture
def counter():
    """Provide a counting listener; its call count is ``counter.calls``."""

    class Counter:
        def __init__(self):
            self.calls = 0
            self.received = []

        def __call__(self, value, operation, obset):
            self.calls += 1
            self.received.append(value)

    return Counter()
