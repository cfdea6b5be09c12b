"""Canonical dashboard schemas (post-normalization shape).

Wire names are camelCase (`checkUpdates`); Python attributes are
snake_case with aliases. Unknown keys are kept (extra="allow") so fields
the loader does not know about still reach the consumer.
"""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Tag(BaseModel):
    name: str
    color: str = "blue"


class Service(BaseModel):
    id: str
    title: str | None = None
    url: str | None = None
    secrets: Dict[str, Any] | None = None
    tags: List[Tag] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class ServiceGroup(BaseModel):
    title: str | None = None
    items: List[Service] = Field(default_factory=list)


class GridConfig(BaseModel):
    small: int = 2
    medium: int = 2
    large: int = 3
    xlarge: int = 4


class LayoutConfig(BaseModel):
    grid: GridConfig = GridConfig()

    model_config = ConfigDict(extra="allow")


class BehaviourConfig(BaseModel):
    target: str = "_blank"

    model_config = ConfigDict(extra="allow")


class CompleteConfig(BaseModel):
    title: str = "Mafl Home Page"
    lang: str = "en"
    theme: str = "system"
    check_updates: bool = Field(True, alias="checkUpdates")
    layout: LayoutConfig = LayoutConfig()
    behaviour: BehaviourConfig = BehaviourConfig()
    tags: List[Tag] = Field(default_factory=list)
    services: List[ServiceGroup] = Field(default_factory=list)
    error: str | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
