"""
ObSet Types
===========

Operation kinds, replacement policies, listener signature and the
configuration object shared by the observable set.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, TypeVar, Union

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .obset import ObSet

T = TypeVar("T")


class SetOperation(str, Enum):
    """Classification of a membership-change event."""

    ADD = "add"
    REMOVE = "remove"
    EMPTY = "empty"
    FULL = "full"

    @classmethod
    def coerce(cls, operation: Union["SetOperation", str]) -> "SetOperation":
        try:
            return cls(operation)
        except ValueError:
            raise ValueError(f"Unknown set operation: {operation!r}") from None


class ReplacementPolicy(str, Enum):
    """Which element a full, bounded set evicts to admit a new one."""

    FIFO = "fifo"  # oldest surviving insertion
    LIFO = "lifo"  # newest insertion

    @classmethod
    def coerce(cls, policy: Union["ReplacementPolicy", str]) -> "ReplacementPolicy":
        if isinstance(policy, cls):
            return policy
        if isinstance(policy, str):
            try:
                return cls(policy.lower())
            except ValueError:
                pass
        raise ConfigurationError(f"Unrecognized replacement policy: {policy!r}")


# listener(value, operation, obset)
SetEventListener = Callable[[T, SetOperation, "ObSet[T]"], None]


@dataclass(frozen=True)
class ObSetOptions:
    """
    Configuration for an ObSet.

    Attributes:
        capacity: Maximum number of elements; None or 0 means unbounded
        replacement_policy: Eviction rule used once a bounded set is full
        free_unused_resources: Drop per-value listener storage as soon as
            it holds no listeners
    """

    capacity: Optional[int] = None
    replacement_policy: ReplacementPolicy = ReplacementPolicy.FIFO
    free_unused_resources: bool = True

    def __post_init__(self):
        capacity = self.capacity
        if capacity is not None:
            if isinstance(capacity, bool) or not isinstance(capacity, int):
                raise ConfigurationError(
                    f"Capacity must be an integer, got {type(capacity).__name__}"
                )
            if capacity < 0:
                raise ConfigurationError(f"Capacity must not be negative: {capacity}")
            if capacity == 0:
                object.__setattr__(self, "capacity", None)

        object.__setattr__(
            self,
            "replacement_policy",
            ReplacementPolicy.coerce(self.replacement_policy),
        )

        if not isinstance(self.free_unused_resources, bool):
            raise ConfigurationError("free_unused_resources must be a bool")

    @property
    def bounded(self) -> bool:
        return self.capacity is not None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ObSetOptions":
        """Build options from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return cls(**mapping)

    def replace(self, **overrides: Any) -> "ObSetOptions":
        if not overrides:
            return self
        merged = {f.name: getattr(self, f.name) for f in fields(self)}
        merged.update(overrides)
        return ObSetOptions.from_mapping(merged)
