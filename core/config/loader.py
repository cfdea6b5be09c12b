"""Dashboard config loading with retry and layered fallback.

Per attempt: exists -> get -> YAML parse -> validate -> tag map ->
service groups -> merge over defaults. Unparseable or empty YAML counts as
an empty document; only a missing resource, a storage failure or a
validation failure fail the attempt.

After the last failed attempt (states, in order):
    ATTEMPTING(n) ... -> FALLBACK_CACHED   last good config from the cache
                      -> FALLBACK_DEFAULT  defaults + `error` text

`ConfigLoader.load()` never raises for any of the above; the only failure
signal callers see is a non-empty `error` on the returned config.

Settings (env, resolved per call):
    MAFL_CONFIG_RETRIES         attempts per load (default 3)
    MAFL_CONFIG_RETRY_DELAY_MS  constant delay between attempts (default 100)
"""
from __future__ import annotations

import asyncio
import enum
import logging
import os
import time
from typing import Any, Awaitable, Callable, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

from core import metrics
from core.errors import map_exception, validate_error_type
from core.storage import Storage, use_storage

from .cache import ConfigCache, config_cache
from .defaults import (
    CONFIG_FILE_NAME,
    get_default_config,
    merge_with_defaults,
)
from .exceptions import ConfigError, ConfigNotFoundError
from .schemas.dashboard import CompleteConfig
from .services import build_service_groups
from .tags import build_tag_map
from .validator import ConfigValidationError, validate_document

logger = logging.getLogger("config.loader")

DEFAULT_RETRIES = 3
DEFAULT_DELAY_MS = 100

Sleep = Callable[[float], Awaitable[Any]]


class LoadState(str, enum.Enum):
    ATTEMPTING = "attempting"
    FALLBACK_CACHED = "fallback_cached"
    FALLBACK_DEFAULT = "fallback_default"
    SUCCEEDED = "succeeded"


class LoaderSettings(BaseModel):
    retries: int = Field(DEFAULT_RETRIES, ge=1)
    delay_ms: int = Field(DEFAULT_DELAY_MS, ge=0)


def get_loader_settings() -> LoaderSettings:
    raw: Dict[str, Any] = {}
    retries = os.getenv("MAFL_CONFIG_RETRIES")
    if retries is not None:
        raw["retries"] = retries
    delay_ms = os.getenv("MAFL_CONFIG_RETRY_DELAY_MS")
    if delay_ms is not None:
        raw["delay_ms"] = delay_ms
    try:
        return LoaderSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid loader settings: {e}") from e


_STR_TAG = "tag:yaml.org,2002:str"


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader whose scalar mapping keys stay as written.

    `2024:` and `Yes:` become the titles "2024" and "Yes" rather than an
    int and a bool.
    """

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            self.flatten_mapping(node)
            node.value = [
                (_as_str_key(key), value) for key, value in node.value
            ]
        return super().construct_mapping(node, deep=deep)


def _as_str_key(node: yaml.Node) -> yaml.Node:
    if isinstance(node, yaml.ScalarNode) and node.tag != _STR_TAG:
        return yaml.ScalarNode(
            _STR_TAG, node.value, node.start_mark, node.end_mark, node.style
        )
    return node


def parse_document(raw: str | bytes | None) -> Any:
    """YAML text -> document; empty, falsy or unparseable input -> {}."""
    if not raw:
        return {}
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = yaml.load(raw, Loader=DocumentLoader)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        logger.warning("Cannot parse %s, using empty: %s", CONFIG_FILE_NAME, e)
        return {}
    return data or {}


def describe_failure(exc: BaseException) -> str:
    if isinstance(exc, ConfigValidationError):
        return exc.summary()
    return str(exc) or exc.__class__.__name__


class ConfigLoader:
    """Loads `config.yml` from a storage namespace.

    `state` and `attempts` describe the most recent `load()` call.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        cache: ConfigCache | None = None,
        *,
        retries: int = DEFAULT_RETRIES,
        delay: float = DEFAULT_DELAY_MS / 1000,
        sleep: Sleep | None = None,
        file_name: str = CONFIG_FILE_NAME,
    ) -> None:
        if retries < 1:
            raise ValueError("retries must be >= 1")
        self.storage = storage if storage is not None else use_storage("data")
        self.cache = cache if cache is not None else config_cache
        self.retries = retries
        self.delay = delay
        self.file_name = file_name
        self._sleep: Sleep = sleep or asyncio.sleep
        self.state: LoadState | None = None
        self.attempts = 0

    def _attempt(self) -> CompleteConfig:
        if not self.storage.exists(self.file_name):
            raise ConfigNotFoundError("Config not found")
        document = parse_document(self.storage.get(self.file_name))
        validate_document(document)
        tag_map = build_tag_map(document.get("tags") or [])
        services = build_service_groups(document.get("services"), tag_map)
        return merge_with_defaults(
            {**document, "services": services}, get_default_config()
        )

    async def load(self) -> CompleteConfig:
        t0 = time.time()
        failure: Exception | None = None
        self.attempts = 0
        for attempt in range(self.retries):
            self.state = LoadState.ATTEMPTING
            self.attempts = attempt + 1
            metrics.inc("config_load_attempts_total")
            try:
                config = await asyncio.to_thread(self._attempt)
            except Exception as e:  # noqa: BLE001
                failure = e
                metrics.inc_load_failure(validate_error_type(map_exception(e)))
                logger.warning(
                    "Config load attempt %d/%d failed: %s",
                    attempt + 1,
                    self.retries,
                    e,
                )
                if attempt < self.retries - 1:
                    await self._sleep(self.delay)
                continue
            self.cache.set(config)
            self.state = LoadState.SUCCEEDED
            metrics.inc_load_outcome("loaded")
            self._observe(t0)
            return config

        assert failure is not None
        result = self._fallback(failure)
        self._observe(t0)
        return result

    def _fallback(self, failure: Exception) -> CompleteConfig:
        logger.error(
            "Config load failed after %d attempts",
            self.retries,
            exc_info=failure,
        )
        cached = self.cache.get()
        if cached is not None:
            logger.warning("Failed to load new config, using cached version.")
            self.state = LoadState.FALLBACK_CACHED
            metrics.inc_load_outcome("cached")
            return cached
        config = get_default_config()
        config.error = describe_failure(failure)
        self.state = LoadState.FALLBACK_DEFAULT
        metrics.inc_load_outcome("default")
        return config

    @staticmethod
    def _observe(t0: float) -> None:
        metrics.observe("config_load_latency_ms", (time.time() - t0) * 1000)


def create_loader(**kwargs: Any) -> ConfigLoader:
    """Loader bound to the `data` namespace with env-driven settings."""
    settings = get_loader_settings()
    kwargs.setdefault("retries", settings.retries)
    kwargs.setdefault("delay", settings.delay_ms / 1000)
    return ConfigLoader(**kwargs)


async def load_config() -> CompleteConfig:
    return await create_loader().load()


__all__ = [
    "ConfigLoader",
    "DocumentLoader",
    "LoadState",
    "LoaderSettings",
    "create_loader",
    "describe_failure",
    "get_loader_settings",
    "load_config",
    "parse_document",
]
