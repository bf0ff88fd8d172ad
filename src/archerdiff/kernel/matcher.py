"""Identity matching between two collections of the same entity kind."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, List, Sequence, Tuple, TypeVar

from archerdiff.kernel.metadata import MetadataBase, PARENT_LINKS
from archerdiff.kernel.normalize import normalize_text

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=MetadataBase)

GLOBAL_PARENT = "global"


class IdentityStrategy(str, Enum):
    """How items are recognized as "the same" across environments.

    GUID: the collector preserved platform GUIDs; exact matching.
    COMPOSITE: normalized display name, qualified by the parent's display
    name for child kinds. Used when GUIDs are unavailable or untrusted.
    """

    GUID = "guid"
    COMPOSITE = "composite"


def composite_key(item: MetadataBase) -> str:
    """Derive the name-based identity key for an item.

    Child kinds are qualified by their parent's name, e.g.
    ``risk register::priority``. A child without a parent name falls under
    ``global``.
    """
    base_key = normalize_text(item.name)
    link = PARENT_LINKS.get(item.kind)
    if link is None:
        return base_key
    parent = getattr(item, link[0])
    parent_key = normalize_text(parent) if parent else GLOBAL_PARENT
    return f"{parent_key}::{base_key}"


def identity_key(item: MetadataBase, strategy: IdentityStrategy) -> str:
    if strategy == IdentityStrategy.GUID:
        return item.guid
    return composite_key(item)


@dataclass
class DuplicateIdentifier:
    """Two items on one side shared a key; the later one was kept."""
    side: str  # "source" | "target"
    key: str
    discarded_name: str
    kept_name: str


@dataclass
class MatchResult(Generic[T]):
    """Partition of both collections by identity key.

    Every key of the union appears in exactly one of the three lists.
    """
    paired: List[Tuple[str, T, T]] = field(default_factory=list)  # (key, source, target)
    source_only: List[Tuple[str, T]] = field(default_factory=list)
    target_only: List[Tuple[str, T]] = field(default_factory=list)
    duplicates: List[DuplicateIdentifier] = field(default_factory=list)


def _index(
    items: Sequence[T],
    strategy: IdentityStrategy,
    side: str,
    duplicates: List[DuplicateIdentifier],
) -> Dict[str, T]:
    # Dict insertion order is first-seen order; a duplicate overwrites the
    # value in place without moving its position.
    index: Dict[str, T] = {}
    for item in items:
        key = identity_key(item, strategy)
        previous = index.get(key)
        if previous is not None:
            logger.warning(
                "Duplicate %s identifier %r in %s snapshot; keeping %r over %r",
                item.kind.value, key, side, item.name, previous.name,
            )
            duplicates.append(DuplicateIdentifier(
                side=side,
                key=key,
                discarded_name=previous.name,
                kept_name=item.name,
            ))
        index[key] = item
    return index


def match_items(
    source_items: Sequence[T],
    target_items: Sequence[T],
    strategy: IdentityStrategy = IdentityStrategy.GUID,
) -> MatchResult[T]:
    """Pair items across two snapshots by identity key.

    Source-originated entries come first in source order (paired or
    source-only), then target-only entries in target order.

    Args:
        source_items: Items of one kind from the source snapshot
        target_items: Items of the same kind from the target snapshot
        strategy: Identity strategy; must be the same for the whole run

    Returns:
        MatchResult with paired, source_only, target_only and any duplicates
    """
    result: MatchResult[T] = MatchResult()
    source_map = _index(source_items, strategy, "source", result.duplicates)
    target_map = _index(target_items, strategy, "target", result.duplicates)

    for key, source_item in source_map.items():
        target_item = target_map.get(key)
        if target_item is not None:
            result.paired.append((key, source_item, target_item))
        else:
            result.source_only.append((key, source_item))

    for key, target_item in target_map.items():
        if key not in source_map:
            result.target_only.append((key, target_item))

    return result
