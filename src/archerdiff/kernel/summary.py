"""Summary aggregation over a comparison result list."""

from typing import Iterable

from archerdiff.codes import ComparisonStatus, EntityKind, Severity
from archerdiff.contracts import (
    CalculatedFieldStats,
    ComparisonResult,
    ComparisonSummary,
    TypeCounts,
)


def summarize(results: Iterable[ComparisonResult]) -> ComparisonSummary:
    """Reduce results to totals, per-kind counts and calculated-field stats.

    Every kind and severity is present in the summary, with zero counts when
    no result has it.
    """
    summary = ComparisonSummary(
        by_type={kind: TypeCounts() for kind in EntityKind},
        by_severity={severity: 0 for severity in Severity},
        calculated_field_stats=CalculatedFieldStats(),
    )
    calc = summary.calculated_field_stats

    for result in results:
        counts = summary.by_type[result.comparison_type]
        summary.total_items += 1
        counts.total += 1
        summary.by_severity[result.severity] += 1

        if result.status == ComparisonStatus.MATCH:
            summary.matched_count += 1
            counts.matched += 1
        elif result.status == ComparisonStatus.MISMATCH:
            summary.mismatched_count += 1
            counts.mismatched += 1
        elif result.status == ComparisonStatus.MISSING_IN_SOURCE:
            summary.missing_in_source_count += 1
            counts.missing_in_source += 1
        elif result.status == ComparisonStatus.MISSING_IN_TARGET:
            summary.missing_in_target_count += 1
            counts.missing_in_target += 1

        if result.comparison_type == EntityKind.CALCULATED_FIELD:
            if result.status == ComparisonStatus.MATCH:
                calc.matched += 1
            elif result.status == ComparisonStatus.MISMATCH:
                calc.mismatched += 1
            if result.has_calculation_difference:
                calc.formula_differences += 1

    return summary
