"""Dashboard config subsystem public API.

Provides:
    load_config()                  -> CompleteConfig (never raises; see loader)
    set_config(config)             -> persist into the `main` namespace
    get_config()                   -> last persisted config or None
    extract_safely_config(config)  -> JSON-compatible copy without `secrets`
    extract_services_from_config() -> {service id: Service}
    get_default_config()           -> fresh default CompleteConfig
"""

from .cache import ConfigCache, config_cache  # noqa: F401
from .defaults import (  # noqa: F401
    CONFIG_FILE_NAME,
    get_default_config,
    merge_with_defaults,
)
from .exceptions import ConfigError, ConfigNotFoundError  # noqa: F401
from .loader import (  # noqa: F401
    ConfigLoader,
    LoadState,
    create_loader,
    load_config,
)
from .schemas.dashboard import (  # noqa: F401
    CompleteConfig,
    Service,
    ServiceGroup,
    Tag,
)
from .store import (  # noqa: F401
    ConfigStore,
    extract_safely_config,
    extract_services_from_config,
    get_config,
    get_service,
    set_config,
)
from .validator import ConfigValidationError, validate_document  # noqa: F401


def reset_for_tests() -> None:
    """Forget the last-known-good config (tests only)."""
    config_cache.clear()


__all__ = [
    "CONFIG_FILE_NAME",
    "CompleteConfig",
    "ConfigCache",
    "ConfigError",
    "ConfigLoader",
    "ConfigNotFoundError",
    "ConfigStore",
    "ConfigValidationError",
    "LoadState",
    "Service",
    "ServiceGroup",
    "Tag",
    "config_cache",
    "create_loader",
    "extract_safely_config",
    "extract_services_from_config",
    "get_config",
    "get_default_config",
    "get_service",
    "load_config",
    "merge_with_defaults",
    "reset_for_tests",
    "set_config",
    "validate_document",
]
