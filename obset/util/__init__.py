"""
ObSet Utils - Backing Structures
================================

Classes:
- IndexedStore: dense unique-value array with O(1) swap-remove
- RecencyList: insertion-order list used to pick eviction victims
- ListenerSet: copy-on-write listener bucket used during dispatch
"""

from .indexed_store import IndexedStore
from .listener_set import ListenerSet
from .recency_list import RecencyList

__all__ = [
    "IndexedStore",
    "ListenerSet",
    "RecencyList",
]
