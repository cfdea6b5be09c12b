"""Config loading exception hierarchy."""


class ConfigError(Exception):
    """Base config exception."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config resource is absent from storage."""
