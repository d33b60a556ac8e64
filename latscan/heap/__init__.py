"""Duplicate-aware heap used to retain the tail of a latency stream."""

from .counting_heap import CountingHeap, HeapKind, Node, U64_MAX

__all__ = [
    'CountingHeap',
    'HeapKind',
    'Node',
    'U64_MAX',
]
