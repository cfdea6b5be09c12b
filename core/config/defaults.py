"""Default dashboard config and schema-aware merge over it.

Merge rules (document over defaults):
  - a present, non-None document value wins
  - layout, layout.grid and behaviour merge key by key
  - services / tags replace the default lists wholesale
  - unknown keys pass through untouched
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from .schemas.dashboard import CompleteConfig

CONFIG_FILE_NAME = "config.yml"


def get_default_config() -> CompleteConfig:
    return CompleteConfig(
        title="Mafl Home Page",
        lang="en",
        theme="system",
        checkUpdates=True,
        layout={"grid": {"small": 2, "medium": 2, "large": 3, "xlarge": 4}},
        behaviour={"target": "_blank"},
        tags=[],
        services=[],
    )


def _present(values: Mapping[str, Any] | None) -> Dict[str, Any]:
    return {k: v for k, v in (values or {}).items() if v is not None}


def _merge_flat(
    override: Mapping[str, Any] | None, base: Dict[str, Any]
) -> Dict[str, Any]:
    merged = dict(base)
    merged.update(_present(override))
    return merged


def _merge_layout(
    override: Mapping[str, Any] | None, base: Dict[str, Any]
) -> Dict[str, Any]:
    override = override or {}
    merged = _merge_flat(
        {k: v for k, v in override.items() if k != "grid"}, base
    )
    merged["grid"] = _merge_flat(override.get("grid"), base["grid"])
    return merged


def merge_with_defaults(
    document: Mapping[str, Any], defaults: CompleteConfig
) -> CompleteConfig:
    base = defaults.model_dump(by_alias=True)
    merged: Dict[str, Any] = dict(base)
    for key, value in document.items():
        # `error` is owned by the loader's fallback path
        if value is None or key == "error":
            continue
        if key == "layout":
            merged[key] = _merge_layout(value, base["layout"])
        elif key == "behaviour":
            merged[key] = _merge_flat(value, base["behaviour"])
        else:
            merged[key] = value
    return CompleteConfig.model_validate(merged)


__all__ = ["CONFIG_FILE_NAME", "get_default_config", "merge_with_defaults"]
