"""Structural validation of the raw `config.yml` document.

Violations are collected into a report tree mirroring the document path;
every node carries an `_errors` list:

    {"_errors": [], "services": {"_errors": [], "0": {"_errors": [],
     "url": {"_errors": ["Field required"]}}}}

`summary()` renders that tree as JSON with empty `_errors` leaves pruned;
this is the text surfaced on the default config when loading gives up.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from .exceptions import ConfigError
from .schemas.document import DocumentSchema, DraftServiceSchema

Issue = Tuple[Tuple[str, ...], str]

_FLAT_SERVICES = TypeAdapter(List[DraftServiceSchema])
_GROUPED_SERVICES = TypeAdapter(Dict[str, List[DraftServiceSchema]])

SERVICES_SHAPE_MESSAGE = (
    "Expected a list of services or a mapping of group title to services"
)


class ConfigValidationError(ConfigError):
    """Document failed structural validation (path-qualified issues)."""

    def __init__(self, issues: Sequence[Issue]) -> None:
        self.issues: List[Issue] = list(issues)
        super().__init__(
            "config validation failed: "
            + ", ".join(
                f"{'.'.join(path) or '<root>'}:{msg}"
                for path, msg in self.issues
            )
        )

    def format(self) -> Dict[str, Any]:
        tree: Dict[str, Any] = {"_errors": []}
        for path, msg in self.issues:
            node = tree
            for part in path:
                node = node.setdefault(part, {"_errors": []})
            node["_errors"].append(msg)
        return tree

    def summary(self) -> str:
        return json.dumps(_prune(self.format()), indent=1)


def _prune(node: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in node.items():
        if key == "_errors":
            if value:
                out[key] = list(value)
        else:
            out[key] = _prune(value)
    return out


def _issues_from(
    exc: ValidationError, prefix: Tuple[str, ...] = ()
) -> List[Issue]:
    return [
        (prefix + tuple(str(p) for p in err["loc"]), err["msg"])
        for err in exc.errors()
    ]


def validate_document(document: Any) -> None:
    """Raise ConfigValidationError if `document` breaks the rules."""
    if not isinstance(document, dict):
        raise ConfigValidationError(
            [((), f"Expected a mapping, received {type(document).__name__}")]
        )
    issues: List[Issue] = []
    try:
        DocumentSchema.model_validate(document)
    except ValidationError as e:
        issues.extend(_issues_from(e))

    services = document.get("services")
    if isinstance(services, list):
        adapter: TypeAdapter | None = _FLAT_SERVICES
    elif isinstance(services, dict):
        adapter = _GROUPED_SERVICES
    elif services is None:
        adapter = None
    else:
        adapter = None
        issues.append((("services",), SERVICES_SHAPE_MESSAGE))
    if adapter is not None:
        try:
            adapter.validate_python(services)
        except ValidationError as e:
            issues.extend(_issues_from(e, ("services",)))

    if issues:
        raise ConfigValidationError(issues)


__all__ = ["ConfigValidationError", "validate_document"]
