"""
Recency List - Insertion-Order Tracking for Eviction
====================================================

This module provides RecencyList, a doubly-linked list keyed by value that
records the order in which values became members. Both ends are available
in O(1), and any value can be unlinked in O(1), so a bounded set can pick
its next eviction victim even after several consecutive evictions.
"""

from typing import Dict, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class _Node(Generic[T]):
    __slots__ = ("value", "prev", "next")

    def __init__(self, value: T):
        self.value = value
        self.prev: Optional["_Node[T]"] = None
        self.next: Optional["_Node[T]"] = None


class RecencyList(Generic[T]):
    """
    Doubly-linked insertion-order list with O(1) unlink by value.

    ``oldest`` is the least-recently-inserted member, ``newest`` the
    most-recently-inserted one. Both are None when the list is empty.
    """

    __slots__ = ("_nodes", "_head", "_tail")

    def __init__(self):
        self._nodes: Dict[T, _Node[T]] = {}
        self._head: Optional[_Node[T]] = None
        self._tail: Optional[_Node[T]] = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, value: object) -> bool:
        return value in self._nodes

    def __iter__(self) -> Iterator[T]:
        """Oldest to newest."""
        node = self._head
        while node is not None:
            yield node.value
            node = node.next

    @property
    def oldest(self) -> Optional[T]:
        return self._head.value if self._head is not None else None

    @property
    def newest(self) -> Optional[T]:
        return self._tail.value if self._tail is not None else None

    def push(self, value: T) -> None:
        """Record value as the newest member. Re-pushing moves it to the end."""
        if value in self._nodes:
            self.unlink(value)

        node = _Node(value)
        self._nodes[value] = node

        if self._tail is None:
            self._head = self._tail = node
        else:
            node.prev = self._tail
            self._tail.next = node
            self._tail = node

    def unlink(self, value: T) -> bool:
        node = self._nodes.pop(value, None)
        if node is None:
            return False

        if node.prev is None:
            self._head = node.next
        else:
            node.prev.next = node.next

        if node.next is None:
            self._tail = node.prev
        else:
            node.next.prev = node.prev

        node.prev = node.next = None
        return True

    def clear(self) -> None:
        self._nodes.clear()
        self._head = self._tail = None
