"""
ObSet - Observable Bounded Sets

A unique-value collection with O(1) membership, insertion and removal, an
optional capacity enforced by FIFO/LIFO eviction, and listeners notified on
every membership change.
"""

from .errors import ConfigurationError, InvariantViolation, ObSetError
from .obset import ANY_VALUE, ObSet
from .types import ObSetOptions, ReplacementPolicy, SetEventListener, SetOperation
from .util import IndexedStore, ListenerSet, RecencyList

__all__ = [
    # Core collection
    "ObSet",
    "ObSetOptions",
    "ReplacementPolicy",
    "SetOperation",
    "SetEventListener",
    # Backing structures
    "IndexedStore",
    "ListenerSet",
    "RecencyList",
    # Exceptions
    "ObSetError",
    "ConfigurationError",
    "InvariantViolation",
    # Sentinel
    "ANY_VALUE",
]
