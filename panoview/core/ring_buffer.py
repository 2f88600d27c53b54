"""Fixed-capacity buffer that evicts its oldest item when full."""
from __future__ import annotations

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """
    Fixed-capacity FIFO (Qt-independent).

    Design notes:
    - ``push`` overwrites the oldest entry once the buffer is full.
    - Iteration yields entries from oldest to newest.
    - It is a recency window, not a log: consumers decide which entries
      are still relevant.
    """

    def __init__(self, capacity: int = 4) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be >= 1, got {capacity}.")
        self._items: list[T | None] = [None] * capacity
        self._start = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            yield self._items[(self._start + i) % self.capacity]

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self.capacity}, items={list(self)!r})"

    def push(self, item: T) -> None:
        """Append an item, evicting the oldest one if the buffer is full."""
        if self._size < self.capacity:
            self._items[(self._start + self._size) % self.capacity] = item
            self._size += 1
        else:
            self._items[self._start] = item
            self._start = (self._start + 1) % self.capacity

    def clear(self) -> None:
        self._items = [None] * self.capacity
        self._start = 0
        self._size = 0

    def oldest(self) -> T:
        """Return the oldest item. Raises IndexError if empty."""
        if not self._size:
            raise IndexError("oldest() on an empty RingBuffer")
        return self._items[self._start]

    def latest(self) -> T:
        """Return the newest item. Raises IndexError if empty."""
        if not self._size:
            raise IndexError("latest() on an empty RingBuffer")
        return self._items[(self._start + self._size - 1) % self.capacity]
