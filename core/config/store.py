"""Persisted runtime config (`main` namespace) and read-side helpers.

`save` writes two keys: `config` (the whole config) and `services` (an
id -> service index rebuilt from every group on each save). Both are JSON
text, so each key is replaced in one storage `set`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import BaseModel

from core import metrics
from core.storage import Storage, use_storage

from .schemas.dashboard import CompleteConfig, Service

logger = logging.getLogger("config.store")

CONFIG_KEY = "config"
SERVICES_KEY = "services"
SECRET_FIELD = "secrets"


def extract_services_from_config(
    config: CompleteConfig,
) -> Dict[str, Service]:
    services: Dict[str, Service] = {}
    for group in config.services:
        for item in group.items:
            services[item.id] = item
    return services


def _strip_secrets(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: _strip_secrets(v) for k, v in value.items() if k != SECRET_FIELD
        }
    if isinstance(value, (list, tuple)):
        return [_strip_secrets(v) for v in value]
    return value


def extract_safely_config(config: BaseModel | Dict[str, Any]) -> Any:
    """Deep JSON-compatible copy without any `secrets` field.

    Used before a config (or part of it) leaves for the client side.
    """
    if isinstance(config, BaseModel):
        data = config.model_dump(mode="json", by_alias=True)
    else:
        data = json.loads(json.dumps(config))
    return _strip_secrets(data)


class ConfigStore:
    def __init__(self, storage: Storage | None = None) -> None:
        self.storage = storage if storage is not None else use_storage("main")

    def save(self, config: CompleteConfig) -> None:
        index = {
            service_id: service.model_dump(mode="json", by_alias=True)
            for service_id, service in extract_services_from_config(
                config
            ).items()
        }
        self.storage.set(CONFIG_KEY, config.to_json())
        self.storage.set(SERVICES_KEY, json.dumps(index))
        metrics.inc("config_saved_total")
        logger.info('Set "main" config')

    def read(self) -> CompleteConfig | None:
        raw = self.storage.get(CONFIG_KEY)
        if raw is None:
            return None
        return CompleteConfig.model_validate_json(raw)

    def get_service(self, service_id: str) -> Service | None:
        raw = self.storage.get(SERVICES_KEY)
        if raw is None:
            return None
        item = json.loads(raw).get(service_id)
        if item is None:
            return None
        return Service.model_validate(item)


def set_config(config: CompleteConfig) -> None:
    ConfigStore().save(config)


def get_config() -> CompleteConfig | None:
    return ConfigStore().read()


def get_service(service_id: str) -> Service | None:
    return ConfigStore().get_service(service_id)


__all__ = [
    "ConfigStore",
    "extract_safely_config",
    "extract_services_from_config",
    "get_config",
    "get_service",
    "set_config",
]
