"""
Indexed Store - O(1) Removable Unique-Value Storage
===================================================

This module provides IndexedStore, a dense array of unique values paired with
a value -> slot index. Membership, insertion and removal are all O(1).

Removal uses swap-remove: the last element is moved into the freed slot and
the array shrinks by one. Surviving elements therefore do NOT keep their
relative order across removals.

Usage:
    store = IndexedStore(["a", "b", "c"])
    store.remove("a")   # "c" moves into slot 0
    store.snapshot()    # ("c", "b")
"""

from typing import Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from ..errors import InvariantViolation

T = TypeVar("T")


class IndexedStore(Generic[T]):
    """
    Array-backed set with a slot index for O(1) membership and removal.

    Invariant: ``index[v] == i`` iff ``slots[i] == v`` for every tracked
    value, and both containers always have the same length.
    """

    __slots__ = ("_slots", "_index")

    def __init__(self, initial_values: Optional[Iterable[T]] = None):
        self._slots: List[T] = []
        self._index: Dict[T, int] = {}

        if initial_values is not None:
            for value in initial_values:
                self.insert(value)

    @property
    def size(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, value: object) -> bool:
        return value in self._index

    def __iter__(self) -> Iterator[T]:
        # Iterate over a copy so callers may mutate the store while looping
        return iter(tuple(self._slots))

    def contains(self, value: T) -> bool:
        return value in self._index

    def insert(self, value: T) -> bool:
        """Append value if absent. Returns False when it was already stored."""
        if value in self._index:
            return False

        self._index[value] = len(self._slots)
        self._slots.append(value)
        return True

    def remove(self, value: T) -> bool:
        """
        Swap-remove value. Returns False when it was not stored.

        Raises:
            InvariantViolation: If the slot recorded for value holds
                something else
        """
        i = self._index.get(value, -1)
        if i < 0:
            return False

        slots = self._slots
        if i >= len(slots) or slots[i] != value:
            raise InvariantViolation(
                f"Index desynchronized: {value!r} recorded at slot {i}"
            )

        last = slots.pop()
        del self._index[value]

        # When value was the last element the pop already removed it
        if i < len(slots):
            slots[i] = last
            self._index[last] = i

        return True

    def index_of(self, value: T) -> int:
        """Current slot of value, or -1 if absent. Changes across removals."""
        return self._index.get(value, -1)

    def snapshot(self) -> Tuple[T, ...]:
        """Current elements in slot order."""
        return tuple(self._slots)

    def clear(self) -> None:
        self._slots.clear()
        self._index.clear()

    def copy(self) -> "IndexedStore[T]":
        clone = IndexedStore.__new__(IndexedStore)
        clone._slots = list(self._slots)
        clone._index = dict(self._index)
        return clone

    def __repr__(self) -> str:
        return f"IndexedStore({self._slots!r})"
