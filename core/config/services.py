"""Service normalization: drafts -> canonical services and groups."""
from __future__ import annotations

import uuid
from typing import Any, Iterable, List, Mapping

from .schemas.dashboard import Service, ServiceGroup
from .tags import TagMap, resolve_tag

DraftService = Mapping[str, Any]


def normalize_services(
    items: Iterable[DraftService], tag_map: TagMap
) -> List[Service]:
    services: List[Service] = []
    for item in items:
        data = dict(item)
        data["id"] = str(uuid.uuid4())
        data["tags"] = [
            resolve_tag(ref, tag_map) for ref in item.get("tags") or []
        ]
        services.append(Service.model_validate(data))
    return services


def build_service_groups(raw: Any, tag_map: TagMap) -> List[ServiceGroup]:
    """Reconcile both declared shapes into an ordered list of groups.

    list            -> one untitled group
    mapping         -> one group per key, key order preserved
    None / absent   -> no groups
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [
            ServiceGroup(
                title=str(title), items=normalize_services(items, tag_map)
            )
            for title, items in raw.items()
        ]
    return [ServiceGroup(items=normalize_services(raw, tag_map))]


__all__ = ["DraftService", "build_service_groups", "normalize_services"]
