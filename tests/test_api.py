"""Tests for the archerdiff public API."""

import json

import pytest

from archerdiff.api import ComparisonReport, compare
from archerdiff.codes import ComparisonStatus, EntityKind, IssueCode
from archerdiff.contracts import ComparisonOptions
from archerdiff.kernel.matcher import IdentityStrategy
from archerdiff._internal.io.snapshot import SnapshotLoadError


def test_compare_with_path_inputs(sample_files):
    source_path, target_path = sample_files

    report = compare(source_path, target_path)

    assert isinstance(report, ComparisonReport)
    assert report.source_name == "Development"
    assert report.target_name == "Production"
    assert report.summary.total_items == len(report.results)
    assert report.has_differences
    assert report.issues == []


def test_compare_with_models_and_dicts(sample_pair):
    source, target = sample_pair
    from_models = compare(source, target)
    from_dicts = compare(
        source.model_dump(mode="json", by_alias=True),
        target.model_dump(mode="json", by_alias=True),
    )
    assert [r.id for r in from_models.results] == [r.id for r in from_dicts.results]
    assert from_models.summary == from_dicts.summary


def test_compare_identical_has_no_differences(sample_pair):
    source, _ = sample_pair
    report = compare(source, source.model_copy(deep=True))
    assert not report.has_differences
    assert report.summary.matched_count == report.summary.total_items


def test_strategy_shortcut_overrides_options(sample_pair):
    source, target = sample_pair
    report = compare(source, target, strategy="composite")
    assert report.options.strategy == IdentityStrategy.COMPOSITE
    field_keys = {r.item_identifier for r in report.by_kind(EntityKind.FIELD)}
    assert "risk register::status" in field_keys


def test_report_helpers(sample_pair):
    source, target = sample_pair
    report = compare(source, target)
    mismatches = report.by_status(ComparisonStatus.MISMATCH)
    assert mismatches
    assert all(r.status == ComparisonStatus.MISMATCH for r in mismatches)
    assert all(r.comparison_type == EntityKind.ROLE for r in report.by_kind(EntityKind.ROLE))


def test_input_shape_issues_are_surfaced():
    report = compare(
        {"modules": [{"id": 1, "guid": "m1", "name": "Risks"}], "fields": "oops"},
        {"modules": [{"id": 2, "guid": "m1", "name": "Risks"}]},
    )
    assert [i.code for i in report.issues] == [IssueCode.INPUT_SHAPE]
    assert report.issues[0].side == "source"
    assert report.summary.matched_count == 1


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        compare(tmp_path / "missing.json", {})


def test_non_object_input_raises(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(SnapshotLoadError):
        compare(path, {})


def test_report_serializes_camel_case(sample_pair):
    source, target = sample_pair
    report = compare(source, target, options=ComparisonOptions())
    data = json.loads(report.model_dump_json(by_alias=True))

    assert {"sourceName", "targetName", "results", "summary", "issues", "options"} <= set(data)
    first = data["results"][0]
    assert {"itemName", "itemGuid", "itemIdentifier", "comparisonType", "propertyDifferences"} <= set(first)
    assert first["sourceItem"]["type"] == first["comparisonType"]
