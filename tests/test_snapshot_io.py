"""Tests for tolerant snapshot loading."""

import json

import pytest

from archerdiff.api import load_snapshot
from archerdiff.codes import EntityKind, IssueCode
from archerdiff.kernel.metadata import CalculatedField, Field, MetadataSnapshot
from archerdiff._internal.io.snapshot import (
    SnapshotLoadError,
    load_snapshot_from_path,
    parse_snapshot,
)


def test_camel_case_document_loads():
    data = {
        "environmentName": "Production",
        "collectedAt": "2024-05-01T10:00:00Z",
        "fields": [
            {"id": 1, "guid": "g1", "name": "Priority", "type": "Field",
             "isRequired": True, "moduleName": "Risks", "moduleGuid": "m1"},
        ],
        "calculatedFields": [
            {"id": 2, "guid": "c1", "name": "Score", "type": "CalculatedField",
             "calculationFormula": "[A] + [B]"},
        ],
    }

    snapshot = parse_snapshot(data)

    assert snapshot.environment_name == "Production"
    assert snapshot.collected_at == "2024-05-01T10:00:00Z"
    assert isinstance(snapshot.fields[0], Field)
    assert snapshot.fields[0].is_required is True
    assert snapshot.fields[0].module_guid == "m1"
    assert isinstance(snapshot.calculated_fields[0], CalculatedField)
    assert snapshot.calculated_fields[0].is_calculated is True


def test_snake_case_keys_are_accepted():
    snapshot = parse_snapshot({"dde_rules": [{"id": 1, "guid": "r1", "name": "Rule", "is_enabled": True}]})
    assert snapshot.dde_rules[0].is_enabled is True


def test_missing_collections_are_empty():
    """A partially collected document is not an error."""
    issues = []
    snapshot = parse_snapshot({"modules": [{"id": 1, "guid": "m1", "name": "Risks"}]}, issues=issues)
    assert len(snapshot.modules) == 1
    assert snapshot.fields == []
    assert snapshot.item_count() == 1
    assert issues == []


def test_non_list_collection_is_recorded_and_treated_as_empty():
    issues = []
    snapshot = parse_snapshot({"roles": {"id": 1}}, side="target", issues=issues)

    assert snapshot.roles == []
    assert len(issues) == 1
    assert issues[0].code == IssueCode.INPUT_SHAPE
    assert issues[0].entity_kind == EntityKind.ROLE
    assert issues[0].side == "target"


def test_invalid_item_is_skipped_with_issue():
    issues = []
    data = {"fields": [
        {"id": 1, "guid": "g1", "name": "Good"},
        {"id": 2, "name": "No Guid"},
        "not an object",
    ]}

    snapshot = parse_snapshot(data, side="source", issues=issues)

    assert [f.name for f in snapshot.fields] == ["Good"]
    assert [i.code for i in issues] == [IssueCode.INPUT_SHAPE, IssueCode.INPUT_SHAPE]
    assert issues[0].identifier == "No Guid"
    assert "fields[1]" in issues[0].message


def test_unknown_attributes_are_ignored():
    snapshot = parse_snapshot({"modules": [{"id": 1, "guid": "m1", "name": "Risks", "color": "blue"}]})
    assert snapshot.modules[0].name == "Risks"


def test_environment_object_display_name():
    snapshot = parse_snapshot({"environment": {"id": "prod", "displayName": "Production"}})
    assert snapshot.environment_name == "Production"


def test_non_object_document_raises():
    with pytest.raises(SnapshotLoadError):
        parse_snapshot([1, 2, 3])


def test_load_from_path(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"modules": [{"id": 1, "guid": "m1", "name": "Risks"}]}), encoding="utf-8")

    snapshot = load_snapshot_from_path(path)

    assert snapshot.modules[0].guid == "m1"


def test_invalid_json_raises_load_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotLoadError):
        load_snapshot_from_path(path)


def test_load_snapshot_accepts_models_dicts_and_paths(tmp_path, sample_files):
    source_path, _ = sample_files
    from_path = load_snapshot(source_path)
    from_str = load_snapshot(str(source_path))
    from_dict = load_snapshot(json.loads(source_path.read_text(encoding="utf-8")))

    assert from_path == from_str == from_dict
    assert load_snapshot(from_path) is from_path
    assert isinstance(from_path, MetadataSnapshot)


def test_sample_document_round_trips(sample_pair, sample_files):
    """The camelCase document written for the sample loads back to an equal snapshot."""
    source, _ = sample_pair
    source_path, _ = sample_files
    assert load_snapshot(source_path) == source
