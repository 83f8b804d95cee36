"""
Test utilities for ObSet.

This package contains shared testing utilities to help write
better, more maintainable tests.
"""

from .memory_utils import (
    assert_collected,
    assert_no_object_leak,
    count_types,
    object_growth,
)

__all__ = [
    "assert_collected",
    "assert_no_object_leak",
    "count_types",
    "object_growth",
]
