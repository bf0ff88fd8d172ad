"""Property-level diff between two matched metadata items."""

from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from archerdiff.codes import EntityKind
from archerdiff.contracts import PropertyDifference
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff.kernel.metadata import KIND_MODELS, MetadataBase, wire_name
from archerdiff.kernel.normalize import format_value, normalize_value

# Environment-local attributes. They differ by construction between
# environments, so comparing them would only produce noise.
EXCLUDED_PROPERTIES: FrozenSet[str] = frozenset({
    "id",
    "guid",  # Matching key, not a comparable attribute
    "type",  # Kind discriminator
    "module_id",
    "values_list_id",
    "rule_id",
    "report_id",
    "level_id",
    "parent_module_id",
    "parent_value_id",
    "related_values_list_id",
    "target_module_id",
    "field_ids",
})

_FIELD_LINKS = frozenset({"module_guid", "related_values_list_guid", "calculation_source_fields"})

# GUID-valued references to other items. Comparable only when both
# snapshots share platform GUIDs; under composite matching they are
# environment-local like the numeric ids above.
GUID_LINK_PROPERTIES: Dict[EntityKind, FrozenSet[str]] = {
    EntityKind.MODULE: frozenset({"parent_module_guid"}),
    EntityKind.FIELD: _FIELD_LINKS,
    EntityKind.CALCULATED_FIELD: _FIELD_LINKS,
    EntityKind.LAYOUT: frozenset({"module_guid", "field_guids"}),
    EntityKind.VALUES_LIST: frozenset(),
    EntityKind.VALUES_LIST_VALUE: frozenset({"values_list_guid"}),
    EntityKind.DDE_RULE: frozenset({"module_guid"}),
    EntityKind.DDE_ACTION: frozenset({"rule_guid"}),
    EntityKind.REPORT: frozenset({"module_guid"}),
    EntityKind.DASHBOARD: frozenset({"i_view_guids"}),
    EntityKind.WORKSPACE: frozenset({"dashboard_guids"}),
    EntityKind.IVIEW: frozenset({"report_guid"}),
    EntityKind.ROLE: frozenset({"permission_guids"}),
    EntityKind.SECURITY_PARAMETER: frozenset({"module_guid"}),
    EntityKind.NOTIFICATION: frozenset({"module_guid"}),
    EntityKind.DATA_FEED: frozenset({"target_module_guid"}),
    EntityKind.SCHEDULE: frozenset(),
}

FORMULA_PROPERTY = "calculation_formula"


def _comparable(model: type, excluded: FrozenSet[str] = frozenset()) -> Tuple[Tuple[str, str], ...]:
    return tuple(
        (attribute, wire_name(model, attribute))
        for attribute in model.model_fields
        if attribute not in EXCLUDED_PROPERTIES and attribute not in excluded
    )


# kind -> ordered ((attribute, wire name), ...), fixed at import time
COMPARABLE_PROPERTIES: Dict[EntityKind, Tuple[Tuple[str, str], ...]] = {
    kind: _comparable(model) for kind, model in KIND_MODELS.items()
}

# Same table without the GUID links, used under composite matching
COMPOSITE_COMPARABLE_PROPERTIES: Dict[EntityKind, Tuple[Tuple[str, str], ...]] = {
    kind: _comparable(model, GUID_LINK_PROPERTIES[kind]) for kind, model in KIND_MODELS.items()
}


def comparable_properties(
    kind: EntityKind,
    strategy: IdentityStrategy = IdentityStrategy.GUID,
) -> Tuple[Tuple[str, str], ...]:
    """Ordered (attribute, wire name) pairs compared for a kind."""
    if strategy == IdentityStrategy.COMPOSITE:
        return COMPOSITE_COMPARABLE_PROPERTIES[kind]
    return COMPARABLE_PROPERTIES[kind]


def _is_calculated(item: MetadataBase) -> bool:
    return bool(getattr(item, "is_calculated", False))


def diff_items(
    source_item: MetadataBase,
    target_item: MetadataBase,
    *,
    ordered_properties: FrozenSet[str] = frozenset(),
    strategy: IdentityStrategy = IdentityStrategy.GUID,
    on_fallback: Optional[Callable[[str, Any, Exception], None]] = None,
) -> List[PropertyDifference]:
    """Enumerate property differences between a matched pair.

    Both items must be of the same kind. Properties are visited in the
    kind's declared order. When both sides are calculated fields, a formula
    difference is flagged ``is_calculation_difference``; it is still the
    single difference recorded for that property.

    Args:
        source_item: Item from the source snapshot
        target_item: Item with the same identity from the target snapshot
        ordered_properties: Wire names of array properties whose order matters
        strategy: Identity strategy the pair was matched with; COMPOSITE
            skips the GUID link properties
        on_fallback: Called with (wire name, value, error) when a value
            could not be serialized and was compared by str()

    Returns:
        List of PropertyDifference (empty means the pair matches)
    """
    kind = source_item.kind
    if target_item.kind != kind:
        raise ValueError(
            f"Cannot diff {kind.value} against {target_item.kind.value}"
        )

    both_calculated = _is_calculated(source_item) and _is_calculated(target_item)
    differences: List[PropertyDifference] = []

    for attribute, prop in comparable_properties(kind, strategy):
        source_value = getattr(source_item, attribute, None)
        target_value = getattr(target_item, attribute, None)

        fallback = None
        if on_fallback is not None:
            def fallback(value, error, _prop=prop):
                on_fallback(_prop, value, error)

        ordered = prop in ordered_properties
        source_form = normalize_value(source_value, ordered=ordered, on_fallback=fallback)
        target_form = normalize_value(target_value, ordered=ordered, on_fallback=fallback)
        if source_form == target_form:
            continue

        differences.append(PropertyDifference(
            property_name=prop,
            source_value=format_value(source_value),
            target_value=format_value(target_value),
            is_calculation_difference=both_calculated and attribute == FORMULA_PROPERTY,
        ))

    return differences
