"""
Copy-on-Write Listener Set
==========================

This module provides ListenerSet, the container holding one bucket of event
listeners (one operation, optionally one value).

Listeners are kept in registration order with O(1) add and discard. Dispatch
never iterates the live container: it iterates a frozen snapshot that is
shared between dispatch passes and only rebuilt after the set is modified.
A listener that registers or removes listeners while being notified
therefore cannot disturb the pass that is running.
"""

from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple


class ListenerSet:
    """
    Ordered listener bucket with copy-on-write snapshots.

    Example:
        listeners = ListenerSet()
        listeners.add(on_add)
        for listener in listeners.snapshot():
            listener(value, operation, obset)  # may add/discard freely
    """

    __slots__ = ("_listeners", "_frozen")

    def __init__(self, listeners: Optional[Iterable[Callable]] = None):
        self._listeners: Dict[Callable, None] = (
            dict.fromkeys(listeners) if listeners is not None else {}
        )
        self._frozen: Optional[Tuple[Callable, ...]] = None

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners

    def __iter__(self) -> Iterator[Callable]:
        return iter(self.snapshot())

    def add(self, listener: Callable) -> bool:
        """Register listener. Returns False if it was already registered."""
        if listener in self._listeners:
            return False
        self._listeners[listener] = None
        self._frozen = None
        return True

    def discard(self, listener: Callable) -> bool:
        """Remove listener if present (like set.discard)."""
        if listener not in self._listeners:
            return False
        del self._listeners[listener]
        self._frozen = None
        return True

    def clear(self) -> None:
        self._listeners.clear()
        self._frozen = None

    def snapshot(self) -> Tuple[Callable, ...]:
        """Frozen view of the current listeners, in registration order."""
        frozen = self._frozen
        if frozen is None:
            frozen = self._frozen = tuple(self._listeners)
        return frozen

    def copy(self) -> "ListenerSet":
        """Independent container holding the same callback references."""
        clone = ListenerSet()
        clone._listeners = dict(self._listeners)
        clone._frozen = self._frozen
        return clone

    def __repr__(self) -> str:
        return f"ListenerSet({len(self._listeners)} listeners)"
