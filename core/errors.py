"""Central error taxonomy for config loading.

Codes are stable strings used as metric labels; exceptions are mapped to
them in one place so new failure kinds cannot drift into ad-hoc labels.
"""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # config.load
    "config-not-found",
    "config-invalid",
    "storage-unavailable",
    # catch-all
    "config-internal",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


def map_exception(e: Exception) -> str:
    from core.config.exceptions import ConfigNotFoundError
    from core.config.validator import ConfigValidationError
    from core.storage import StorageUnavailableError

    if isinstance(e, ConfigNotFoundError):
        return "config-not-found"
    if isinstance(e, ConfigValidationError):
        return "config-invalid"
    if isinstance(e, (StorageUnavailableError, OSError)):
        return "storage-unavailable"
    return "config-internal"


__all__ = ["validate_error_type", "map_exception"]
