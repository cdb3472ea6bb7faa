"""Thread-safe registry of named items that can be shut down together."""

from __future__ import annotations

import threading
from typing import Dict, Generic, Iterable, List, Optional, Protocol, TypeVar


class Poolable(Protocol):
    @property
    def name(self) -> str: ...

    def shutdown(self) -> None: ...


I = TypeVar("I", bound=Poolable)


class Pool(Generic[I]):
    """Items indexed by their name."""

    def __init__(self) -> None:
        self._items: Dict[str, I] = {}
        self._lock = threading.RLock()

    def add(self, item: I) -> None:
        """Add an item, replacing any item of the same name."""
        with self._lock:
            self._items[item.name] = item

    def remove(self, item: I) -> None:
        """Remove the item with the given item's name, if present."""
        with self._lock:
            self._items.pop(item.name, None)

    def get_all(self) -> Dict[str, I]:
        """Return a copy of the name to item mapping."""
        with self._lock:
            return dict(self._items)

    def get_by_name(self, name: str) -> Optional[I]:
        """Return the item of this name, or None."""
        with self._lock:
            return self._items.get(name)

    def get_by_names(self, names: Iterable[str]) -> List[I]:
        """Return the items of the given names, in that order, skipping unknown names."""
        with self._lock:
            return [self._items[n] for n in names if n in self._items]

    def shutdown(self) -> None:
        """Shut down every item in the pool."""
        with self._lock:
            items = list(self._items.values())
        for item in items:
            item.shutdown()