"""Tag lookup and resolution of inline tag references."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Union

from .schemas.dashboard import Tag

DEFAULT_TAG_COLOR = "blue"

TagRef = Union[str, Tag, Mapping[str, Any]]
TagMap = Dict[str, Tag]


def _as_tag(value: Tag | Mapping[str, Any]) -> Tag:
    if isinstance(value, Tag):
        return value
    return Tag.model_validate(value)


def build_tag_map(tags: Iterable[Tag | Mapping[str, Any]]) -> TagMap:
    tag_map: TagMap = {}
    for tag in tags:
        resolved = _as_tag(tag)
        tag_map[resolved.name] = resolved
    return tag_map


def resolve_tag(ref: TagRef, tag_map: TagMap) -> Tag:
    """Return the tag a service entry refers to.

    A name looks up the declared tag (keeping its color) or synthesizes a
    default-colored one; an inline tag object is taken as-is.
    """
    if isinstance(ref, str):
        declared = tag_map.get(ref)
        if declared is not None:
            return declared
        return Tag(name=ref, color=DEFAULT_TAG_COLOR)
    return _as_tag(ref)


__all__ = [
    "DEFAULT_TAG_COLOR",
    "TagMap",
    "TagRef",
    "build_tag_map",
    "resolve_tag",
]
