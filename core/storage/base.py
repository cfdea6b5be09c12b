"""Key-value storage contract shared by all backends."""
from __future__ import annotations

from typing import Any, List, Protocol


class StorageUnavailableError(Exception):
    """Raised when a backend cannot be read or written (I/O failure)."""


class Storage(Protocol):  # pragma: no cover
    def exists(self, key: str) -> bool:  # noqa: D401
        ...

    def get(self, key: str) -> Any | None:  # noqa: D401
        ...

    def set(self, key: str, value: Any) -> None:  # noqa: D401
        ...

    def keys(self) -> List[str]:  # noqa: D401
        ...


__all__ = ["Storage", "StorageUnavailableError"]
