"""Public API for archerdiff.

High-level functions that return complete, structured results.
Callers (UI, exporters, scripts) should use these instead of importing
from archerdiff.kernel or archerdiff._internal.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from archerdiff.codes import ComparisonStatus, EntityKind
from archerdiff.contracts import (
    ComparisonOptions,
    ComparisonResult,
    ComparisonSummary,
    EngineIssue,
)
from archerdiff.kernel.engine import compare_snapshots
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff.kernel.metadata import MetadataSnapshot
from archerdiff.kernel.summary import summarize
from archerdiff._internal.io.snapshot import load_snapshot_from_path, parse_snapshot

logger = logging.getLogger(__name__)

SnapshotInput = Union[MetadataSnapshot, Dict, str, os.PathLike, Path]


class ComparisonReport(BaseModel):
    """Stable result model for one comparison run."""
    source_name: Optional[str] = None
    target_name: Optional[str] = None
    options: ComparisonOptions
    results: List[ComparisonResult]
    summary: ComparisonSummary
    issues: List[EngineIssue] = []

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def by_status(self, status: ComparisonStatus) -> List[ComparisonResult]:
        return [r for r in self.results if r.status == status]

    def by_kind(self, kind: EntityKind) -> List[ComparisonResult]:
        return [r for r in self.results if r.comparison_type == kind]

    @property
    def has_differences(self) -> bool:
        return self.summary.difference_count > 0


def load_snapshot(
    snapshot: SnapshotInput,
    side: Optional[str] = None,
    issues: Optional[List[EngineIssue]] = None,
) -> MetadataSnapshot:
    """Load a snapshot from a model, a decoded dict, or a JSON file path."""
    if isinstance(snapshot, MetadataSnapshot):
        return snapshot
    if isinstance(snapshot, dict):
        return parse_snapshot(snapshot, side=side, issues=issues)
    return load_snapshot_from_path(Path(snapshot), side=side, issues=issues)


def compare(
    source: SnapshotInput,
    target: SnapshotInput,
    options: Optional[ComparisonOptions] = None,
    strategy: Optional[Union[IdentityStrategy, str]] = None,
) -> ComparisonReport:
    """
    Compare two metadata snapshots and summarize the differences.

    Args:
        source: Source snapshot (model, dict, or path to JSON)
        target: Target snapshot (model, dict, or path to JSON)
        options: Comparison options
        strategy: Shortcut overriding ``options.strategy``

    Returns:
        ComparisonReport with one result per item identity, the summary,
        and every recoverable issue met while loading and comparing.

    This is READ-ONLY: snapshots are never mutated and nothing is written.
    """
    options = options or ComparisonOptions()
    if strategy is not None:
        options = options.model_copy(update={"strategy": IdentityStrategy(strategy)})

    issues: List[EngineIssue] = []
    source_snapshot = load_snapshot(source, side="source", issues=issues)
    target_snapshot = load_snapshot(target, side="target", issues=issues)

    results = compare_snapshots(source_snapshot, target_snapshot, options, issues)
    summary = summarize(results)
    logger.info(
        "Compared %d source / %d target items: %d results, %d differences, %d issues",
        source_snapshot.item_count(), target_snapshot.item_count(),
        summary.total_items, summary.difference_count, len(issues),
    )

    return ComparisonReport(
        source_name=source_snapshot.environment_name,
        target_name=target_snapshot.environment_name,
        options=options,
        results=results,
        summary=summary,
        issues=issues,
    )
