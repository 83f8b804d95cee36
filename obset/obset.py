"""
ObSet - Observable, Optionally Bounded Set
==========================================

This module provides ObSet, a set of unique values that notifies listeners
whenever its membership changes and can enforce a maximum size.

Key Features:
- O(1) membership test, insertion and removal (swap-remove backing store)
- Optional capacity with FIFO or LIFO eviction of existing elements
- Listeners scoped to an operation, or to an operation on one value
- One-shot listeners and automatic clean-up of unused listener storage
- Derived "empty" and "full" events

Usage:
    tags = ObSet(capacity=2)
    tags.on_operation("full", lambda value, op, s: print("full after", value))
    tags.once_value("remove", "urgent", lambda value, op, s: print("resolved"))

    tags.add("urgent")
    tags.add("later")   # prints "full after later"
    tags.add("now")     # evicts "urgent" (FIFO), prints "resolved"

Dispatch order for one event: operation-scoped listeners first, then the
listeners registered for that value, each group in registration order.
Listener membership is frozen at the start of each group, so listeners
added while an event is being delivered only see later events.

Iteration order is slot order, which is NOT stable across removals.
"""

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
    TypeVar,
    Union,
)

from .errors import InvariantViolation
from .types import ObSetOptions, ReplacementPolicy, SetEventListener, SetOperation
from .util import IndexedStore, ListenerSet, RecencyList

T = TypeVar("T")

OperationLike = Union[SetOperation, str]


# ============================================================================
# SENTINEL VALUES
# ============================================================================


class _ANY_VALUE:
    """Scope marker for listeners that fire for every value."""

    def __repr__(self):
        return "ANY_VALUE"


ANY_VALUE = _ANY_VALUE()


# ============================================================================
# OBSET
# ============================================================================


class ObSet(Generic[T]):
    """
    Observable set with optional capacity and replacement policy.

    Mutators return whether the set changed; adding a present value or
    removing an absent one is a silent no-op. Listener registration
    methods return the set so calls can be chained.

    Args:
        initial_values: Values inserted without firing any event
        options: ObSetOptions or a mapping with the same keys
        **overrides: Individual option overrides (capacity=..., ...)

    Raises:
        ConfigurationError: If the options are invalid
    """

    def __init__(
        self,
        initial_values: Optional[Iterable[T]] = None,
        options: Union[ObSetOptions, Mapping[str, Any], None] = None,
        **overrides: Any,
    ):
        if options is None:
            options = ObSetOptions()
        elif not isinstance(options, ObSetOptions):
            options = ObSetOptions.from_mapping(options)
        self._options = options.replace(**overrides)

        self._store: IndexedStore[T] = IndexedStore()

        # Only bounded sets need to know who to evict
        self._recency: Optional[RecencyList[T]] = (
            RecencyList() if self._options.bounded else None
        )

        self._operation_listeners: Dict[SetOperation, ListenerSet] = {
            operation: ListenerSet() for operation in SetOperation
        }
        self._value_listeners: Dict[T, Dict[SetOperation, ListenerSet]] = {}

        # listener -> {(operation, scope)} registered as one-shot
        self._once: Dict[Callable, Set[Tuple[SetOperation, Any]]] = {}
        self._firing_once: Set[Tuple[Callable, SetOperation, Any]] = set()
        # firing one-shots that registered themselves again while running
        self._rearmed: Set[Tuple[Callable, SetOperation, Any]] = set()

        if initial_values is not None:
            for value in initial_values:
                self._admit(value)

    # ========================================================================
    # CONFIGURATION
    # ========================================================================

    @property
    def options(self) -> ObSetOptions:
        return self._options

    @property
    def capacity(self) -> Optional[int]:
        return self._options.capacity

    @property
    def replacement_policy(self) -> ReplacementPolicy:
        return self._options.replacement_policy

    @property
    def free_unused_resources(self) -> bool:
        return self._options.free_unused_resources

    # ========================================================================
    # QUERIES
    # ========================================================================

    @property
    def size(self) -> int:
        return self._store.size

    @property
    def is_empty(self) -> bool:
        return self._store.size == 0

    @property
    def is_full(self) -> bool:
        capacity = self._options.capacity
        return capacity is not None and self._store.size >= capacity

    @property
    def internal_array(self) -> Tuple[T, ...]:
        """Elements in their current slot order (read-only)."""
        return self._store.snapshot()

    def __len__(self) -> int:
        return self._store.size

    def __contains__(self, value: object) -> bool:
        return self._store.contains(value)

    def __iter__(self) -> Iterator[T]:
        return iter(self._store.snapshot())

    def contains(self, value: T) -> bool:
        return self._store.contains(value)

    def has_every(self, *values: T) -> bool:
        """True if every value is a member (vacuously true for no values)."""
        for value in values:
            if not self._store.contains(value):
                return False
        return True

    def has_some(self, *values: T) -> bool:
        """True if at least one value is a member."""
        for value in values:
            if self._store.contains(value):
                return True
        return False

    def xor(self, a: T, b: T) -> bool:
        """True if exactly one of a and b is a member."""
        return self._store.contains(a) != self._store.contains(b)

    def snapshot(self) -> Tuple[T, ...]:
        return self._store.snapshot()

    def to_list(self) -> List[T]:
        """Current elements as a list, for JSON encoders and the like."""
        return list(self._store.snapshot())

    # ========================================================================
    # MUTATORS
    # ========================================================================

    def add(self, value: T) -> bool:
        """
        Add value, evicting an element first if the set is full.

        Fires ``add`` and, when the insertion fills the set, ``full``.
        An eviction fires its own ``remove`` (and possibly ``empty``)
        before the ``add``.

        Returns:
            True if value was inserted, False if it was already a member

        Raises:
            InvariantViolation: If eviction neither freed a slot nor admitted value
        """
        if self._store.contains(value):
            return False

        if self.is_full:
            self._replace(value)

        # A remove listener may have added value during eviction
        if not self._store.insert(value):
            return False
        if self._recency is not None:
            self._recency.push(value)

        self._dispatch(SetOperation.ADD, value)

        if self.is_full:
            self._dispatch(SetOperation.FULL, value)

        return True

    def remove(self, value: T) -> bool:
        """
        Remove value. Fires ``remove``, then ``empty`` if nothing is left.

        Returns:
            True if value was removed, False if it was not a member
        """
        if not self._store.remove(value):
            return False
        if self._recency is not None:
            self._recency.unlink(value)

        self._dispatch(SetOperation.REMOVE, value)

        if self._store.size == 0:
            self._dispatch(SetOperation.EMPTY, value)

        return True

    def clear(self) -> None:
        """Remove every element one by one, firing the usual events."""
        for value in reversed(self._store.snapshot()):
            self.remove(value)

    def _admit(self, value: T) -> None:
        """Insert without events, evicting silently when full."""
        if self._store.contains(value):
            return

        if self.is_full:
            victim = self._pick_victim()
            self._store.remove(victim)
            self._recency.unlink(victim)

        self._store.insert(value)
        if self._recency is not None:
            self._recency.push(value)

    def _pick_victim(self) -> T:
        recency = self._recency
        if recency is None or not len(recency):
            raise InvariantViolation("Set reports itself full but has no eviction victim")

        policy = self._options.replacement_policy
        if policy is ReplacementPolicy.FIFO:
            victim = recency.oldest
        elif policy is ReplacementPolicy.LIFO:
            victim = recency.newest
        else:
            raise InvariantViolation(f"Unhandled replacement policy: {policy!r}")

        if not self._store.contains(victim):
            raise InvariantViolation(f"Eviction victim {victim!r} is not a member")

        return victim

    def _replace(self, incoming: T) -> None:
        victim = self._pick_victim()
        logging.debug(
            f"Evicting {victim!r} ({self._options.replacement_policy.value}) "
            f"at capacity {self._options.capacity}"
        )

        self.remove(victim)

        if self.is_full and not self._store.contains(incoming):
            raise InvariantViolation(
                f"Evicting {victim!r} did not free a slot "
                f"({self._store.size}/{self._options.capacity})"
            )

    # ========================================================================
    # EVENT DISPATCH
    # ========================================================================

    def _dispatch(self, operation: SetOperation, value: T) -> None:
        listeners = self._operation_listeners[operation]
        if listeners:
            self._notify(listeners, operation, value, ANY_VALUE)

        buckets = self._value_listeners.get(value)
        if buckets is None:
            return

        listeners = buckets.get(operation)
        if listeners:
            self._notify(listeners, operation, value, value)

    def _notify(
        self,
        listeners: ListenerSet,
        operation: SetOperation,
        value: T,
        scope: Any,
    ) -> None:
        for listener in listeners.snapshot():
            firing = (listener, operation, scope)
            if self._firing_once and firing in self._firing_once:
                continue

            if not self._unmark_once(listener, operation, scope):
                listener(value, operation, self)
                continue

            # One-shot: spent before the call, never re-entered, removed after
            self._firing_once.add(firing)
            try:
                listener(value, operation, self)
            finally:
                self._firing_once.discard(firing)
                self._retire(listener, operation, scope)

    def _retire(self, listener: Callable, operation: SetOperation, scope: Any) -> None:
        firing = (listener, operation, scope)
        if firing in self._rearmed:
            self._rearmed.discard(firing)
            return

        logging.debug(f"Retiring one-shot {operation.value} listener {listener!r}")

        if scope is ANY_VALUE:
            self._operation_listeners[operation].discard(listener)
        else:
            self._discard_value_listener(operation, scope, listener)

    # ========================================================================
    # LISTENER REGISTRATION
    # ========================================================================

    def on(
        self,
        operation: OperationLike,
        listener: SetEventListener,
        *,
        value: Any = ANY_VALUE,
        once: bool = False,
    ) -> "ObSet[T]":
        """
        Register listener for operation, optionally scoped to one value.

        Args:
            operation: "add", "remove", "empty" or "full"
            listener: Called as listener(value, operation, obset)
            value: Only fire for this value (default: every value)
            once: Deregister after the first invocation

        Returns:
            This set, for chaining
        """
        if value is ANY_VALUE:
            return self.on_operation(operation, listener, once=once)
        return self.on_value(operation, value, listener, once=once)

    def once(
        self,
        operation: OperationLike,
        listener: SetEventListener,
        *,
        value: Any = ANY_VALUE,
    ) -> "ObSet[T]":
        return self.on(operation, listener, value=value, once=True)

    def on_operation(
        self, operation: OperationLike, listener: SetEventListener, once: bool = False
    ) -> "ObSet[T]":
        """Register listener for every value of operation."""
        operation = SetOperation.coerce(operation)
        _check_listener(listener)

        self._operation_listeners[operation].add(listener)
        self._mark_once(listener, operation, ANY_VALUE, once)
        return self

    def on_value(
        self,
        operation: OperationLike,
        value: T,
        listener: SetEventListener,
        once: bool = False,
    ) -> "ObSet[T]":
        """Register listener for operation on one specific value."""
        operation = SetOperation.coerce(operation)
        _check_listener(listener)

        buckets = self._value_listeners.get(value)
        if buckets is None:
            buckets = self._value_listeners[value] = {}

        listeners = buckets.get(operation)
        if listeners is None:
            listeners = buckets[operation] = ListenerSet()

        listeners.add(listener)
        self._mark_once(listener, operation, value, once)
        return self

    def once_operation(
        self, operation: OperationLike, listener: SetEventListener
    ) -> "ObSet[T]":
        return self.on_operation(operation, listener, once=True)

    def once_value(
        self, operation: OperationLike, value: T, listener: SetEventListener
    ) -> "ObSet[T]":
        return self.on_value(operation, value, listener, once=True)

    def off(
        self,
        operation: OperationLike,
        listener: SetEventListener,
        *,
        value: Any = ANY_VALUE,
    ) -> "ObSet[T]":
        """Deregister listener. Unknown listeners are ignored."""
        if value is ANY_VALUE:
            return self.off_operation(operation, listener)
        return self.off_value(operation, value, listener)

    def off_operation(
        self, operation: OperationLike, listener: SetEventListener
    ) -> "ObSet[T]":
        operation = SetOperation.coerce(operation)

        self._operation_listeners[operation].discard(listener)
        self._unmark_once(listener, operation, ANY_VALUE)
        return self

    def off_value(
        self, operation: OperationLike, value: T, listener: SetEventListener
    ) -> "ObSet[T]":
        operation = SetOperation.coerce(operation)

        self._discard_value_listener(operation, value, listener)
        self._unmark_once(listener, operation, value)
        return self

    def off_all(self) -> "ObSet[T]":
        """Drop every listener registration. Elements are untouched."""
        for listeners in self._operation_listeners.values():
            listeners.clear()
        self._value_listeners.clear()
        self._once.clear()
        self._rearmed.clear()
        return self

    def _mark_once(
        self, listener: Callable, operation: SetOperation, scope: Any, once: bool
    ) -> None:
        firing = (listener, operation, scope)
        if self._firing_once and firing in self._firing_once:
            self._rearmed.add(firing)

        if once:
            self._once.setdefault(listener, set()).add((operation, scope))
        else:
            # Re-registering without once makes the registration persistent
            self._unmark_once(listener, operation, scope)

    def _unmark_once(self, listener: Callable, operation: SetOperation, scope: Any) -> bool:
        scopes = self._once.get(listener)
        if scopes is None or (operation, scope) not in scopes:
            return False

        scopes.discard((operation, scope))
        if not scopes:
            del self._once[listener]
        return True

    def _discard_value_listener(
        self, operation: SetOperation, value: T, listener: Callable
    ) -> bool:
        buckets = self._value_listeners.get(value)
        if buckets is None:
            return False

        listeners = buckets.get(operation)
        if listeners is None:
            return False

        removed = listeners.discard(listener)

        if self._options.free_unused_resources:
            self._free_unused_resources_in(buckets, value)

        return removed

    def _free_unused_resources_in(
        self, buckets: Dict[SetOperation, ListenerSet], value: T
    ) -> None:
        """Drop empty listener sets for value, then value's entry if bare."""
        for operation in [op for op, listeners in buckets.items() if not listeners]:
            del buckets[operation]

        if buckets:
            return

        # A listener may already have replaced the entry we were holding
        if self._value_listeners.get(value) is buckets:
            del self._value_listeners[value]
            logging.debug(f"Freed listener storage for {value!r}")

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    def listener_count(self, operation: OperationLike, value: Any = ANY_VALUE) -> int:
        """Number of listeners registered for operation (on value, if given)."""
        operation = SetOperation.coerce(operation)

        if value is ANY_VALUE:
            return len(self._operation_listeners[operation])

        listeners = self._value_listeners.get(value, {}).get(operation)
        return len(listeners) if listeners is not None else 0

    def has_value_listeners(self, value: T) -> bool:
        """Whether listener storage is currently allocated for value."""
        return value in self._value_listeners

    def stats(self) -> dict:
        return {
            "size": self._store.size,
            "capacity": self._options.capacity,
            "replacement_policy": self._options.replacement_policy.value,
            "operation_listeners": {
                operation.value: len(listeners)
                for operation, listeners in self._operation_listeners.items()
            },
            "valued_listener_entries": len(self._value_listeners),
            "pending_once": sum(len(scopes) for scopes in self._once.values()),
        }

    # ========================================================================
    # CLONING
    # ========================================================================

    def clone(self) -> "ObSet[T]":
        """
        Independent copy with the same options, elements and listeners.

        The callbacks themselves are shared; their containers are not, so
        registrations made on either set afterwards stay local to it.
        """
        clone: ObSet[T] = type(self)(options=self._options)

        clone._store = self._store.copy()
        if self._recency is not None:
            for value in self._recency:
                clone._recency.push(value)

        clone._operation_listeners = {
            operation: listeners.copy()
            for operation, listeners in self._operation_listeners.items()
        }
        clone._value_listeners = {
            value: {operation: listeners.copy() for operation, listeners in buckets.items()}
            for value, buckets in self._value_listeners.items()
        }
        clone._once = {listener: set(scopes) for listener, scopes in self._once.items()}

        return clone

    __copy__ = clone

    def __repr__(self) -> str:
        elements = ", ".join(repr(value) for value in self._store.snapshot())
        if self._options.bounded:
            return (
                f"ObSet({{{elements}}}, capacity={self._options.capacity}, "
                f"policy={self._options.replacement_policy.value})"
            )
        return f"ObSet({{{elements}}})"


def _check_listener(listener: Any) -> None:
    if not callable(listener):
        raise TypeError(f"Listener must be callable, got {type(listener).__name__}")
