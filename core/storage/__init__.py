"""Named storage namespaces.

Namespaces:
    data  -> directory backend rooted at MAFL_DATA_DIR (raw config.yml)
    main  -> in-memory backend (persisted runtime config + service index)

`use_storage(name)` creates the backend lazily on first access; `mount`
swaps one in explicitly (tests, embedding applications).
"""
from __future__ import annotations

import os
from pathlib import Path
from threading import Lock
from typing import Callable, Dict

from .base import Storage, StorageUnavailableError
from .fs import FileStorage
from .memory import MemoryStorage

DEFAULT_DATA_DIR = "data"

_MOUNTS: Dict[str, Storage] = {}
_LOCK = Lock()


def _resolve_data_dir() -> Path:
    """Resolve data directory each call honoring env var changes."""
    return Path(os.getenv("MAFL_DATA_DIR", DEFAULT_DATA_DIR))


_FACTORIES: Dict[str, Callable[[], Storage]] = {
    "data": lambda: FileStorage(_resolve_data_dir()),
    "main": MemoryStorage,
}


def use_storage(name: str) -> Storage:
    with _LOCK:
        storage = _MOUNTS.get(name)
        if storage is None:
            factory = _FACTORIES.get(name, MemoryStorage)
            storage = factory()
            _MOUNTS[name] = storage
        return storage


def mount(name: str, storage: Storage) -> None:
    with _LOCK:
        _MOUNTS[name] = storage


def reset_for_tests() -> None:
    with _LOCK:
        _MOUNTS.clear()


__all__ = [
    "FileStorage",
    "MemoryStorage",
    "Storage",
    "StorageUnavailableError",
    "mount",
    "reset_for_tests",
    "use_storage",
]
