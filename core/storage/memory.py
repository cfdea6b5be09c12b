"""In-memory storage backend.

Single dict guarded by an RLock; each set replaces the whole value under
its key so readers observe either the previous or the new value.
"""
from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List


class MemoryStorage:
    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._items: Dict[str, Any] = dict(initial or {})
        self._lock = RLock()

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:  # pragma: no cover
        with self._lock:
            self._items.clear()


__all__ = ["MemoryStorage"]
