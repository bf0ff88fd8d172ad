"""Tests for property-level diffing of matched pairs."""

import pytest

from archerdiff.codes import EntityKind
from archerdiff.kernel.differ import (
    COMPARABLE_PROPERTIES,
    EXCLUDED_PROPERTIES,
    GUID_LINK_PROPERTIES,
    comparable_properties,
    diff_items,
)
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff.kernel.metadata import CalculatedField, Field, KIND_MODELS, Layout, Module, Role


def _field(**kwargs) -> Field:
    base = dict(id=1, guid="g1", name="Priority", module_id=5, module_name="Risks", module_guid="m1")
    base.update(kwargs)
    return Field(**base)


def _calculated(formula: str, **kwargs) -> CalculatedField:
    return CalculatedField(
        id=1, guid="f1", name="Open Flag", calculation_formula=formula, **kwargs
    )


def test_required_flag_difference_reports_wire_name_and_labels():
    differences = diff_items(_field(is_required=True), _field(is_required=False))

    assert len(differences) == 1
    diff = differences[0]
    assert diff.property_name == "isRequired"
    assert diff.source_value == "Yes"
    assert diff.target_value == "No"
    assert diff.is_calculation_difference is False


def test_local_identifiers_are_excluded():
    """Items that differ only in environment-local ids match."""
    source = _field(id=1, module_id=5, related_values_list_id=10)
    target = _field(id=99, module_id=9, related_values_list_id=20)
    assert diff_items(source, target) == []


def test_layout_field_ids_excluded_but_field_guids_compared():
    source = Layout(id=1, guid="l1", name="Default", field_ids=[1, 2], field_guids=["a", "b"])
    target = Layout(id=2, guid="l1", name="Default", field_ids=[7, 8], field_guids=["b", "a"])
    assert diff_items(source, target) == []

    target = Layout(id=2, guid="l1", name="Default", field_ids=[7, 8], field_guids=["a", "c"])
    differences = diff_items(source, target)
    assert [d.property_name for d in differences] == ["fieldGuids"]


def test_whitespace_only_difference_is_ignored_but_originals_are_shown():
    """Normalized-equal names produce no difference; other differences show raw text."""
    source = _field(name="Open  Status", description=" First ")
    target = _field(name="open status", description="Second")

    differences = diff_items(source, target)

    assert [d.property_name for d in differences] == ["description"]
    assert differences[0].source_value == " First "
    assert differences[0].target_value == "Second"


def test_absent_value_formats_as_empty():
    differences = diff_items(_field(alias=None), _field(alias="priority"))
    assert differences[0].property_name == "alias"
    assert differences[0].source_value == "<empty>"


def test_formula_difference_is_flagged_once():
    """A formula change on calculated fields is a single flagged difference."""
    source = _calculated('IF([Status]="Open",1,0)')
    target = _calculated('IF([Status]="Open",1,0) /* modified */')

    differences = diff_items(source, target)

    assert len(differences) == 1
    assert differences[0].property_name == "calculationFormula"
    assert differences[0].is_calculation_difference is True


def test_formula_on_plain_fields_is_not_a_calculation_difference():
    """Only pairs where both sides are calculated carry the flag."""
    source = _field(calculation_formula="A")
    target = _field(calculation_formula="B")

    differences = diff_items(source, target)

    assert len(differences) == 1
    assert differences[0].is_calculation_difference is False


def test_ordered_properties_option():
    source = Role(id=1, guid="r1", name="Admin", permission_guids=["p1", "p2"])
    target = Role(id=2, guid="r1", name="Admin", permission_guids=["p2", "p1"])

    assert diff_items(source, target) == []
    differences = diff_items(source, target, ordered_properties=frozenset({"permissionGuids"}))
    assert [d.property_name for d in differences] == ["permissionGuids"]


def test_properties_visited_in_declared_order():
    source = _field(name="A", is_key=False, field_type="Text", is_required=False)
    target = _field(name="B", is_key=True, field_type="Date", is_required=True)

    names = [d.property_name for d in diff_items(source, target)]

    assert names == ["name", "fieldType", "isRequired", "isKey"]


def test_mismatched_kinds_raise():
    with pytest.raises(ValueError):
        diff_items(Module(id=1, guid="g", name="A"), _field())


def test_comparable_table_covers_every_kind():
    assert set(COMPARABLE_PROPERTIES) == set(EntityKind)
    for kind, properties in COMPARABLE_PROPERTIES.items():
        attributes = {attribute for attribute, _ in properties}
        assert not attributes & EXCLUDED_PROPERTIES
        assert attributes <= set(KIND_MODELS[kind].model_fields)
        assert "name" in attributes


def test_guid_links_are_real_attributes():
    assert set(GUID_LINK_PROPERTIES) == set(EntityKind)
    for kind, links in GUID_LINK_PROPERTIES.items():
        assert links <= set(KIND_MODELS[kind].model_fields)


def test_composite_strategy_drops_guid_links():
    composite = [prop for _, prop in comparable_properties(EntityKind.LAYOUT, IdentityStrategy.COMPOSITE)]
    assert "moduleGuid" not in composite
    assert "fieldGuids" not in composite
    assert "moduleName" in composite
    assert comparable_properties(EntityKind.LAYOUT) == COMPARABLE_PROPERTIES[EntityKind.LAYOUT]


def test_composite_pair_with_foreign_guids_matches():
    source = Layout(id=1, guid="a", name="Default", module_name="Risks", module_guid="m-a", field_guids=["f-a"])
    target = Layout(id=2, guid="b", name="Default", module_name="Risks", module_guid="m-b", field_guids=["f-b"])

    assert diff_items(source, target, strategy=IdentityStrategy.COMPOSITE) == []
    assert [d.property_name for d in diff_items(source, target)] == ["moduleGuid", "fieldGuids"]
