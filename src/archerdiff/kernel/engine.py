"""Comparison orchestrator: match, diff and classify every entity kind."""

import logging
import uuid
from typing import List, Optional

from archerdiff.codes import ComparisonStatus, EntityKind, IssueCode
from archerdiff.contracts import (
    ComparisonOptions,
    ComparisonResult,
    EngineIssue,
    PropertyDifference,
)
from archerdiff.kernel.differ import diff_items
from archerdiff.kernel.matcher import match_items
from archerdiff.kernel.metadata import (
    KIND_MODELS,
    MetadataBase,
    MetadataSnapshot,
    parent_guid,
    parent_name,
)
from archerdiff.kernel.severity import classify_severity

logger = logging.getLogger(__name__)

# Fixed output order; matching is independent per kind.
KIND_ORDER = tuple(KIND_MODELS)

_RESULT_NAMESPACE = uuid.UUID("5b0e6c1e-3f4a-4d8e-9a57-2f1c0d7e9b41")


def _result_id(kind: EntityKind, key: str) -> str:
    # Keys are unique per kind within a run, so ids are unique and repeatable.
    return str(uuid.uuid5(_RESULT_NAMESPACE, f"{kind.value}::{key}"))


def _build_result(
    kind: EntityKind,
    key: str,
    status: ComparisonStatus,
    source_item: Optional[MetadataBase],
    target_item: Optional[MetadataBase],
    differences: Optional[List[PropertyDifference]] = None,
) -> ComparisonResult:
    # Display attributes come from the source side when it exists.
    shown = source_item if source_item is not None else target_item
    return ComparisonResult(
        id=_result_id(kind, key),
        comparison_type=kind,
        item_name=shown.name,
        item_identifier=key,
        item_guid=shown.guid,
        parent_name=parent_name(shown),
        parent_guid=parent_guid(shown),
        status=status,
        severity=classify_severity(kind, status, differences),
        property_differences=differences or [],
        source_item=source_item,
        target_item=target_item,
    )


def compare_kind(
    kind: EntityKind,
    source_items: List[MetadataBase],
    target_items: List[MetadataBase],
    options: Optional[ComparisonOptions] = None,
    issues: Optional[List[EngineIssue]] = None,
) -> List[ComparisonResult]:
    """Compare one kind's collections from both snapshots.

    Args:
        kind: Entity kind of both collections
        source_items: Source snapshot collection
        target_items: Target snapshot collection
        options: Comparison options (defaults: GUID strategy, unordered arrays)
        issues: If given, duplicate identifiers and serialization fallbacks
            are appended here

    Returns:
        Results in matcher order: source-originated, then target-only
    """
    options = options or ComparisonOptions()
    issues = issues if issues is not None else []
    ordered = options.ordered_properties_for(kind)

    matched = match_items(source_items, target_items, options.strategy)
    for dup in matched.duplicates:
        issues.append(EngineIssue(
            code=IssueCode.DUPLICATE_IDENTIFIER,
            message=(
                f"Identifier '{dup.key}' appears more than once in the {dup.side} "
                f"snapshot; kept '{dup.kept_name}', discarded '{dup.discarded_name}'"
            ),
            entity_kind=kind,
            side=dup.side,
            identifier=dup.key,
        ))

    results: List[ComparisonResult] = []

    for key, source_item, target_item in matched.paired:
        def on_fallback(prop, value, error, _key=key):
            issues.append(EngineIssue(
                code=IssueCode.SERIALIZATION_FALLBACK,
                message=f"Property '{prop}' could not be serialized ({error}); compared as text",
                entity_kind=kind,
                identifier=_key,
            ))

        differences = diff_items(
            source_item,
            target_item,
            ordered_properties=ordered,
            strategy=options.strategy,
            on_fallback=on_fallback,
        )
        status = ComparisonStatus.MISMATCH if differences else ComparisonStatus.MATCH
        results.append(_build_result(kind, key, status, source_item, target_item, differences))

    for key, source_item in matched.source_only:
        results.append(_build_result(kind, key, ComparisonStatus.MISSING_IN_TARGET, source_item, None))

    for key, target_item in matched.target_only:
        results.append(_build_result(kind, key, ComparisonStatus.MISSING_IN_SOURCE, None, target_item))

    return results


def compare_snapshots(
    source: MetadataSnapshot,
    target: MetadataSnapshot,
    options: Optional[ComparisonOptions] = None,
    issues: Optional[List[EngineIssue]] = None,
) -> List[ComparisonResult]:
    """Compare every entity kind of two snapshots.

    A failure while comparing one kind is logged and recorded as a
    KIND_FAILED issue; that kind contributes no results and the remaining
    kinds are still compared. Neither snapshot is mutated.

    Args:
        source: Snapshot of the source environment
        target: Snapshot of the target environment
        options: Comparison options; the strategy applies to every kind
        issues: Optional list that receives recoverable issues

    Returns:
        Flat result list in KIND_ORDER, then matcher order within each kind
    """
    options = options or ComparisonOptions()
    issues = issues if issues is not None else []
    all_results: List[ComparisonResult] = []

    for kind in KIND_ORDER:
        kind_issues: List[EngineIssue] = []
        try:
            source_items = source.items_for(kind)
            target_items = target.items_for(kind)
            kind_results = compare_kind(kind, source_items, target_items, options, kind_issues)
        except Exception as e:
            logger.exception("Comparison of %s failed; reporting it as empty", kind.value)
            issues.append(EngineIssue(
                code=IssueCode.KIND_FAILED,
                message=f"Comparison of {kind.value} failed: {e}",
                entity_kind=kind,
            ))
            continue

        issues.extend(kind_issues)
        logger.debug(
            "%s: %d source, %d target -> %d results",
            kind.value, len(source_items), len(target_items), len(kind_results),
        )
        all_results.extend(kind_results)

    return all_results
