"""Directory-backed storage (one file per key).

Writes go through a temp file + os.replace so a concurrent reader never
sees a half-written value. OSError is surfaced as StorageUnavailableError.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List

from .base import StorageUnavailableError


class FileStorage:
    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        root = self.base_dir.resolve()
        if path != root and root not in path.parents:
            raise KeyError(f"key escapes storage dir: {key}")
        return path

    def exists(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot read {key} from {self.base_dir}: {e}"
            ) from e

    def set(self, key: str, value: str | bytes) -> None:
        path = self._path(key)
        data = value.encode("utf-8") if isinstance(value, str) else value
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot write {key} to {self.base_dir}: {e}"
            ) from e

    def keys(self) -> List[str]:
        if not self.base_dir.exists():
            return []
        return sorted(
            p.relative_to(self.base_dir).as_posix()
            for p in self.base_dir.rglob("*")
            if p.is_file() and not p.name.startswith(".tmp-")
        )


__all__ = ["FileStorage"]
