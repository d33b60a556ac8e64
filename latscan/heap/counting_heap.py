"""
Counting heap.

A binary heap whose nodes are (value, count) pairs. Repeated values are
coalesced into one node, so memory grows with the number of distinct
latencies rather than the number of samples.

Layout:
    entries[0]     unused, keeps parent/child arithmetic simple
    entries[1]     root
    entries[i]     children at 2i and 2i+1, parent at i // 2

A dict maps each value to its node, giving O(1) duplicate detection.

Example:
    heap = CountingHeap(capacity=1024, kind=HeapKind.MIN)
    for latency in (12, 7, 12, 30):
        heap.insert(latency)
    heap.top_value()     # 7
    heap.total_weight()  # 4
    heap.pop()           # Node(value=7, count=1)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

# Samples are unsigned 64-bit magnitudes
U64_MAX = (1 << 64) - 1


class HeapKind(Enum):
    """Ordering of a heap: which end of the value range sits at the root."""
    MAX = 1
    MIN = 2


@dataclass
class Node:
    """A retained value and the number of samples it represents."""
    value: int
    count: int = 1


class CountingHeap:
    """
    Array-backed binary heap with duplicate coalescing.

    Not thread-safe: a heap has a single owner that inserts and pops.
    """

    def __init__(self, capacity: int = 1024, kind: HeapKind = HeapKind.MIN):
        """
        Initialize an empty heap.

        Args:
            capacity: Expected number of distinct values. A sizing hint
                only, the heap grows past it.
            kind: HeapKind.MIN keeps the smallest value at the root,
                HeapKind.MAX the largest.
        """
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")

        self.capacity = capacity
        self.kind = kind
        self._better = self._comparer(kind)

        self._entries: List[Optional[Node]] = [None]
        self._index: Dict[int, Node] = {}
        self._total_weight: int = 0

    @staticmethod
    def _comparer(kind: HeapKind) -> Callable[[Node, Node], bool]:
        """Return a predicate that is True when lhs belongs above rhs."""
        if kind == HeapKind.MAX:
            return lambda lhs, rhs: lhs.value > rhs.value
        return lambda lhs, rhs: lhs.value < rhs.value

    def insert(self, value: int) -> None:
        """
        Add one sample.

        A value already in the heap only bumps its node's count; a new
        value gets its own node and is sifted up.
        """
        if not 0 <= value <= U64_MAX:
            raise ValueError(f"value out of u64 range: {value}")

        node = self._index.get(value)
        if node is not None:
            node.count += 1
        else:
            node = Node(value, 1)
            self._entries.append(node)
            self._index[value] = node
            self._sift_up(len(self._entries) - 1)
        self._total_weight += 1

    def pop(self) -> Optional[Node]:
        """
        Remove and return the root node, or None if the heap is empty.

        The whole node goes at once: total weight drops by its count,
        not by one.
        """
        if len(self._entries) <= 1:
            return None

        root = self._entries[1]
        last = self._entries.pop()
        if len(self._entries) > 1:
            self._entries[1] = last
            self._sift_down(1)

        del self._index[root.value]
        self._total_weight -= root.count
        return root

    def _pick(self, idx: int) -> int:
        """Return whichever of idx and its two children belongs on top."""
        entries = self._entries
        size = len(entries)
        left = idx * 2
        right = left + 1

        if left >= size:
            return idx

        better = self._better

        if right == size:
            return left if better(entries[left], entries[idx]) else idx

        if better(entries[right], entries[left]):
            return right if better(entries[right], entries[idx]) else idx
        return left if better(entries[left], entries[idx]) else idx

    def _sift_down(self, idx: int) -> None:
        entries = self._entries
        while True:
            best = self._pick(idx)
            if best == idx:
                return
            entries[best], entries[idx] = entries[idx], entries[best]
            idx = best

    def _sift_up(self, idx: int) -> None:
        # Re-picks among the parent and both of its children at every level,
        # not only along the path of the inserted node.
        entries = self._entries
        while idx > 1:
            parent = idx // 2
            best = self._pick(parent)
            if best == parent:
                return
            entries[best], entries[parent] = entries[parent], entries[best]
            idx = parent

    def peek(self) -> Optional[Node]:
        """Root node without removing it, or None if empty."""
        if len(self._entries) <= 1:
            return None
        return self._entries[1]

    def top_value(self) -> int:
        """Root value, 0 if empty. Use peek() when 0 is a valid sample."""
        if len(self._entries) <= 1:
            return 0
        return self._entries[1].value

    def top_count(self) -> int:
        """Root count, 0 if empty."""
        if len(self._entries) <= 1:
            return 0
        return self._entries[1].count

    def total_weight(self) -> int:
        """Number of samples represented (sum of node counts)."""
        return self._total_weight

    def distinct_count(self) -> int:
        """Number of nodes (distinct values) retained."""
        return len(self._entries) - 1

    def nodes(self) -> List[Node]:
        """Retained nodes in array order (root first)."""
        return list(self._entries[1:])

    def validate(self) -> List[str]:
        """Check heap invariants. Returns list of violations (empty if healthy)."""
        errors = []
        entries = self._entries

        for i in range(2, len(entries)):
            parent = entries[i // 2]
            if not self._better(parent, entries[i]):
                errors.append(
                    f"Heap order broken at {i}: parent {parent.value}, "
                    f"child {entries[i].value}"
                )

        if len(self._index) != self.distinct_count():
            errors.append(
                f"Index size {len(self._index)} != node count {self.distinct_count()}"
            )
        for node in entries[1:]:
            if self._index.get(node.value) is not node:
                errors.append(f"Index entry missing or stale for {node.value}")

        weight = sum(node.count for node in entries[1:])
        if weight != self._total_weight:
            errors.append(f"Total weight {self._total_weight} != sum of counts {weight}")

        return errors

    def __len__(self) -> int:
        return self.distinct_count()

    def __repr__(self) -> str:
        return (
            f"CountingHeap(kind={self.kind.name}, distinct={self.distinct_count()}, "
            f"weight={self._total_weight})"
        )
