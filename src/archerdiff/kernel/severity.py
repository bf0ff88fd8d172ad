"""Severity classification for comparison results.

Priority order, first hit wins:
1. Match -> Info
2. Missing on either side -> Critical for essential kinds, else Warning
3. Mismatch with a calculation difference -> Critical
4. Mismatch touching a key property -> Warning
5. Any other mismatch -> Info
"""

from typing import FrozenSet, Optional, Sequence

from archerdiff.codes import ComparisonStatus, EntityKind, Severity
from archerdiff.contracts import PropertyDifference

# Formula and automation logic: their absence silently changes behavior.
CRITICAL_MISSING_KINDS: FrozenSet[EntityKind] = frozenset({
    EntityKind.CALCULATED_FIELD,
    EntityKind.DDE_RULE,
    EntityKind.DDE_ACTION,
})

# Wire names of structurally significant properties.
KEY_PROPERTIES: FrozenSet[str] = frozenset({
    "name",
    "alias",
    "isRequired",
    "isKey",
    "fieldType",
    "isCalculated",
    "isEnabled",
})


def classify_severity(
    kind: EntityKind,
    status: ComparisonStatus,
    differences: Optional[Sequence[PropertyDifference]] = None,
) -> Severity:
    if status == ComparisonStatus.MATCH:
        return Severity.INFO

    if status in (ComparisonStatus.MISSING_IN_SOURCE, ComparisonStatus.MISSING_IN_TARGET):
        return Severity.CRITICAL if kind in CRITICAL_MISSING_KINDS else Severity.WARNING

    differences = differences or ()
    if any(d.is_calculation_difference for d in differences):
        return Severity.CRITICAL
    if any(d.property_name in KEY_PROPERTIES for d in differences):
        return Severity.WARNING
    return Severity.INFO
