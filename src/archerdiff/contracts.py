"""Public result and option models for archerdiff.

Python attributes are snake_case; serialized documents (``by_alias=True``)
use the camelCase names exporters and the UI depend on (``itemName``,
``sourceValue``, ``isCalculationDifference``, ...).
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from archerdiff.codes import ComparisonStatus, EntityKind, IssueCode, Severity
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff.kernel.metadata import MetadataItem


_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PropertyDifference(BaseModel):
    """One named property whose normalized values differ across a pair."""
    property_name: str  # Wire name, e.g. "isRequired"
    source_value: str  # Formatted, not normalized
    target_value: str
    is_calculation_difference: bool = False

    model_config = _WIRE


class ComparisonResult(BaseModel):
    """Outcome for one item identity (one per matched or unmatched item)."""
    id: str
    comparison_type: EntityKind
    item_name: str
    item_identifier: str  # Key used for matching (GUID or composite key)
    item_guid: str
    parent_name: Optional[str] = None
    parent_guid: Optional[str] = None
    status: ComparisonStatus
    severity: Severity
    property_differences: List[PropertyDifference] = []
    source_item: Optional[MetadataItem] = None
    target_item: Optional[MetadataItem] = None

    model_config = _WIRE

    @property
    def has_calculation_difference(self) -> bool:
        return any(d.is_calculation_difference for d in self.property_differences)


class TypeCounts(BaseModel):
    total: int = 0
    matched: int = 0
    mismatched: int = 0
    missing_in_source: int = 0
    missing_in_target: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalculatedFieldStats(BaseModel):
    matched: int = 0
    mismatched: int = 0
    formula_differences: int = 0  # Mismatches caused by formula text

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComparisonSummary(BaseModel):
    """Totals derived from a full result list.

    Invariants:
    - sum(by_type[k].total) == total_items
    - each kind's matched + mismatched + missing_* == that kind's total
    """
    total_items: int = 0
    matched_count: int = 0
    mismatched_count: int = 0
    missing_in_source_count: int = 0
    missing_in_target_count: int = 0
    by_type: Dict[EntityKind, TypeCounts]
    by_severity: Dict[Severity, int]
    calculated_field_stats: CalculatedFieldStats

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def difference_count(self) -> int:
        return self.mismatched_count + self.missing_in_source_count + self.missing_in_target_count


class EngineIssue(BaseModel):
    """A recoverable condition met while loading or comparing snapshots."""
    code: IssueCode
    message: str
    entity_kind: Optional[EntityKind] = None
    side: Optional[str] = None  # "source" | "target"
    identifier: Optional[str] = None

    model_config = _WIRE


class ComparisonOptions(BaseModel):
    """Per-run comparison settings.

    ``ordered_array_properties`` lists, per kind, the array properties (wire
    names) whose element order is significant. All other arrays compare as
    multisets.
    """
    strategy: IdentityStrategy = IdentityStrategy.GUID
    ordered_array_properties: Dict[EntityKind, List[str]] = {}

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def ordered_properties_for(self, kind: EntityKind) -> frozenset:
        return frozenset(self.ordered_array_properties.get(kind, ()))
