"""Raw `config.yml` document rules (pre-normalization).

Everything is optional at the root: absent fields are filled from defaults
later. `services` is checked separately by the validator because it has
two accepted shapes (flat list or mapping of named groups).
"""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, PositiveInt, StrictBool


class TagSchema(BaseModel):
    name: str
    color: str


class DraftServiceSchema(BaseModel):
    title: str
    url: str
    tags: List[str | TagSchema] | None = None
    secrets: Dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")


class GridSchema(BaseModel):
    small: PositiveInt | None = None
    medium: PositiveInt | None = None
    large: PositiveInt | None = None
    xlarge: PositiveInt | None = None


class LayoutSchema(BaseModel):
    grid: GridSchema | None = None

    model_config = ConfigDict(extra="allow")


class BehaviourSchema(BaseModel):
    target: str | None = None

    model_config = ConfigDict(extra="allow")


class DocumentSchema(BaseModel):
    title: str | None = None
    lang: str | None = None
    theme: str | None = None
    checkUpdates: StrictBool | None = None  # noqa: N815
    layout: LayoutSchema | None = None
    behaviour: BehaviourSchema | None = None
    tags: List[TagSchema] | None = None
    services: Any = None

    model_config = ConfigDict(extra="allow")
