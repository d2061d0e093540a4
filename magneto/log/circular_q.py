"""Bounded queue that drops its oldest item when full."""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class CircularQueue(Generic[T]):
    """Fixed-capacity FIFO queue.

    Pushing into a full queue drops the oldest item and counts an overrun.
    A queue built with ``max_items == 0`` is disabled and ignores pushes.
    """

    def __init__(self, max_items: int = 0) -> None:
        if max_items < 0:
            raise ValueError(f"max_items must not be negative, got {max_items}")
        self._max_items = max_items
        self._items: deque[T] = deque()
        self._overruns = 0

    @property
    def max_items(self) -> int:
        return self._max_items

    def push_back(self, item: T) -> None:
        """Append ``item``, dropping the oldest item if there is no room left."""
        if self._max_items == 0:
            return
        if len(self._items) == self._max_items:
            self._items.popleft()
            self._overruns += 1
        self._items.append(item)

    def front(self) -> T:
        """Return the oldest item without removing it."""
        if not self._items:
            raise IndexError("front of an empty queue")
        return self._items[0]

    def pop_front(self) -> T:
        """Remove and return the oldest item."""
        if not self._items:
            raise IndexError("pop from an empty queue")
        return self._items.popleft()

    def empty(self) -> bool:
        return not self._items

    def full(self) -> bool:
        return self._max_items > 0 and len(self._items) == self._max_items

    def overrun_counter(self) -> int:
        """Number of items dropped because the queue was full."""
        return self._overruns

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))