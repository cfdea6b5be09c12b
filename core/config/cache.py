"""Last-known-good config holder.

Single slot guarded by a lock. Written only after a successful load and
read only as a fallback source; last writer wins.
"""
from __future__ import annotations

from threading import Lock

from .schemas.dashboard import CompleteConfig


class ConfigCache:
    def __init__(self) -> None:
        self._config: CompleteConfig | None = None
        self._lock = Lock()

    def get(self) -> CompleteConfig | None:
        with self._lock:
            return self._config

    def set(self, config: CompleteConfig) -> None:
        with self._lock:
            self._config = config

    def clear(self) -> None:
        with self._lock:
            self._config = None


config_cache = ConfigCache()

__all__ = ["ConfigCache", "config_cache"]
