"""
Stable priority queue used to order view children.

Items iterate from highest to lowest priority. Items sharing a priority
iterate in the order they were inserted. Iterating never consumes the queue,
so a view can be rendered any number of times.
"""

from __future__ import annotations

import bisect
import itertools
from dataclasses import dataclass, field
from typing import Any, Iterator

EXTR_DATA = 1
EXTR_PRIORITY = 2
EXTR_BOTH = 3


@dataclass(order=True)
class _Entry:
    """A queued item. Sorts by (-priority, serial)."""
    sort_key: tuple[int, int]
    item: Any = field(compare=False)
    priority: int = field(compare=False)


class PriorityQueue:
    """
    Ordered multiset keyed by priority with FIFO tie-breaking.

    Usage:
        queue = PriorityQueue()
        queue.insert("a", 0)
        queue.insert("b", 5)
        list(queue)  # ["b", "a"]
    """

    def __init__(self):
        self._entries: list[_Entry] = []
        self._serial = itertools.count()

    def insert(self, item: Any, priority: int = 0) -> None:
        """Insert an item at the given priority."""
        entry = _Entry((-priority, next(self._serial)), item, priority)
        bisect.insort(self._entries, entry)

    def remove(self, item: Any) -> bool:
        """
        Remove the first occurrence of an item (by identity).

        Args:
            item: The object to remove

        Returns:
            True if an occurrence was removed, False if the item was absent
        """
        for index, entry in enumerate(self._entries):
            if entry.item is item:
                del self._entries[index]
                return True
        return False

    def count(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def contains(self, item: Any) -> bool:
        """Check whether the item is queued (by identity)."""
        return any(entry.item is item for entry in self._entries)

    def has_priority(self, priority: int) -> bool:
        """Check whether any item is queued at the given priority."""
        return any(entry.priority == priority for entry in self._entries)

    def top(self) -> Any:
        """Return the highest priority item without removing it."""
        if not self._entries:
            raise IndexError("top of an empty priority queue")
        return self._entries[0].item

    def extract(self) -> Any:
        """Remove and return the highest priority item."""
        if not self._entries:
            raise IndexError("extract from an empty priority queue")
        return self._entries.pop(0).item

    def clear(self) -> None:
        self._entries.clear()

    def to_list(self, extract: int = EXTR_DATA) -> list:
        """
        Snapshot the queue in iteration order.

        Args:
            extract: EXTR_DATA for items, EXTR_PRIORITY for priorities,
                     EXTR_BOTH for (item, priority) tuples

        Returns:
            List in iteration order
        """
        if extract == EXTR_DATA:
            return [entry.item for entry in self._entries]
        if extract == EXTR_PRIORITY:
            return [entry.priority for entry in self._entries]
        if extract == EXTR_BOTH:
            return [(entry.item, entry.priority) for entry in self._entries]
        raise ValueError(f"Unknown extract flag: {extract!r}")

    def copy(self) -> "PriorityQueue":
        """Return an independent queue with the same items in the same order."""
        duplicate = PriorityQueue()
        for item, priority in self.to_list(EXTR_BOTH):
            duplicate.insert(item, priority)
        return duplicate

    def __iter__(self) -> Iterator[Any]:
        # Snapshot so callers may mutate the queue while iterating
        return iter([entry.item for entry in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: Any) -> bool:
        return self.contains(item)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"PriorityQueue({self.to_list(EXTR_BOTH)!r})"
