"""Fixed-capacity ring buffer that overwrites its oldest entry."""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Holds up to ``capacity`` entries; writing to a full buffer drops the oldest."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque[T] = deque(maxlen=capacity)

    def write(self, entry: T) -> None:
        """Append an entry, discarding the oldest when full."""
        self._items.append(entry)

    def read(self, n: int) -> list[T]:
        """Remove and return up to ``n`` of the oldest entries."""
        count = max(0, min(n, len(self._items)))
        return [self._items.popleft() for _ in range(count)]

    def free(self) -> int:
        """Number of entries that can be written before overwriting."""
        return self.capacity - len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        """Iterate from oldest to newest without consuming."""
        return iter(list(self._items))