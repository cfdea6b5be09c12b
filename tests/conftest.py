"""Pytest configuration ensuring project root is importable.

Adds repository root and src/ to sys.path explicitly to avoid
interpreter/path quirks.
"""
from __future__ import annotations

import sys
from pathlib import Path
import os
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolate_config_state():  # noqa: D401
    """Ensure global config/storage side effects do not leak between tests.

    - Clear the last-known-good config cache
    - Drop mounted storage namespaces
    - Reset metrics
    - Restore MAFL_DATA_DIR to original value
    """
    from core import metrics, storage  # local import
    from core.config import reset_for_tests

    prev = os.environ.get("MAFL_DATA_DIR")
    reset_for_tests()
    storage.reset_for_tests()
    metrics.reset_for_tests()
    try:
        yield
    finally:
        reset_for_tests()
        storage.reset_for_tests()
        if prev is None:
            os.environ.pop("MAFL_DATA_DIR", None)
        else:
            os.environ["MAFL_DATA_DIR"] = prev


class RecordingSleep:
    """Async sleep stand-in recording requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
