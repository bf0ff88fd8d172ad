"""Tolerant snapshot loading (internal).

A collected document may be partial: collections deselected in the
collection options are simply absent. Absent collections load as empty.
A collection that is not a list, or an item that fails validation, is
dropped and recorded as an INPUT_SHAPE issue instead of failing the load.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from archerdiff.codes import IssueCode
from archerdiff.contracts import EngineIssue
from archerdiff.kernel.metadata import (
    KIND_MODELS,
    SNAPSHOT_COLLECTIONS,
    MetadataSnapshot,
)

logger = logging.getLogger(__name__)


class SnapshotLoadError(ValueError):
    """Raised when a snapshot document is not a JSON object at all."""


def _environment_name(data: Dict[str, Any]) -> Optional[str]:
    name = data.get("environmentName") or data.get("environment_name")
    if name:
        return str(name)
    environment = data.get("environment")
    if isinstance(environment, dict):
        display = environment.get("displayName") or environment.get("display_name")
        return str(display) if display else None
    if isinstance(environment, str):
        return environment
    return None


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))


def parse_snapshot(
    data: Any,
    side: Optional[str] = None,
    issues: Optional[List[EngineIssue]] = None,
) -> MetadataSnapshot:
    """Build a MetadataSnapshot from a decoded JSON document.

    Args:
        data: Decoded document (camelCase or snake_case collection keys)
        side: "source" or "target", used in issue records
        issues: Optional list that receives INPUT_SHAPE issues

    Returns:
        MetadataSnapshot holding every item that validated

    Raises:
        SnapshotLoadError: If ``data`` is not a mapping
    """
    if isinstance(data, MetadataSnapshot):
        return data
    if not isinstance(data, dict):
        raise SnapshotLoadError(
            f"Snapshot document must be a JSON object, got {type(data).__name__}"
        )
    issues = issues if issues is not None else []

    collections: Dict[str, list] = {}
    for kind, attribute in SNAPSHOT_COLLECTIONS.items():
        wire = to_camel(attribute)
        raw = data.get(wire, data.get(attribute))
        if raw is None:
            collections[attribute] = []
            continue
        if not isinstance(raw, list):
            logger.warning("%s snapshot: collection %r is not a list; treating as empty", side, wire)
            issues.append(EngineIssue(
                code=IssueCode.INPUT_SHAPE,
                message=f"Collection '{wire}' must be a list, got {type(raw).__name__}; treated as empty",
                entity_kind=kind,
                side=side,
            ))
            collections[attribute] = []
            continue

        model = KIND_MODELS[kind]
        items = []
        for index, entry in enumerate(raw):
            try:
                items.append(model.model_validate(entry))
            except ValidationError as e:
                label = entry.get("name") if isinstance(entry, dict) else None
                logger.warning("%s snapshot: skipping invalid %s #%d", side, kind.value, index)
                issues.append(EngineIssue(
                    code=IssueCode.INPUT_SHAPE,
                    message=f"{wire}[{index}] skipped ({_first_error(e)})",
                    entity_kind=kind,
                    side=side,
                    identifier=str(label) if label is not None else None,
                ))
        collections[attribute] = items

    collected_at = data.get("collectedAt") or data.get("collected_at")
    return MetadataSnapshot(
        environment_name=_environment_name(data),
        collected_at=str(collected_at) if collected_at else None,
        **collections,
    )


def load_snapshot_from_path(
    path: Union[str, Path],
    side: Optional[str] = None,
    issues: Optional[List[EngineIssue]] = None,
) -> MetadataSnapshot:
    """Load a snapshot from a JSON file."""
    snapshot_path = Path(path)
    with open(snapshot_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotLoadError(f"{snapshot_path}: invalid JSON ({e})") from e
    return parse_snapshot(data, side=side, issues=issues)
