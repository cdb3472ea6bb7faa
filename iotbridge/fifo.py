"""Bounded thread-safe first-in first-out queue."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, TypeVar

T = TypeVar("T")


class Fifo(Generic[T]):
    """FIFO queue holding at most max_length items; the oldest are dropped first."""

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length
        self._items: Deque[T] = deque(maxlen=max(0, max_length))
        self._lock = threading.Lock()

    def enqueue(self, value: T) -> None:
        """Append a value, dropping the oldest one when the queue is full."""
        if self.max_length < 1:
            return
        with self._lock:
            self._items.append(value)

    def dequeue(self) -> T:
        """Remove and return the oldest value; raise IndexError when empty."""
        with self._lock:
            if not self._items:
                raise IndexError("dequeue from an empty fifo")
            return self._items.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)