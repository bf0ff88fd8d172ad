"""Tests for collection options and the JSON directory repository."""

import json

import pytest

from archerdiff.codes import EntityKind
from archerdiff.collector import (
    CollectionOptions,
    Environment,
    JsonDirectoryRepository,
    apply_collection_options,
)
from archerdiff._internal.sample_data import snapshot_document


def test_default_options_exclude_large_collections():
    options = CollectionOptions()
    assert not options.includes(EntityKind.VALUES_LIST_VALUE)
    assert not options.includes(EntityKind.DDE_ACTION)
    assert options.includes(EntityKind.MODULE)
    assert len(options.included_kinds()) == len(EntityKind) - 2


def test_everything_includes_every_kind():
    assert CollectionOptions.everything().included_kinds() == list(EntityKind)


def test_deselected_collections_are_emptied(sample_pair):
    source, _ = sample_pair
    scoped = apply_collection_options(source, CollectionOptions())

    assert scoped.values_list_values == []
    assert scoped.dde_actions == []
    assert scoped.fields == source.fields
    assert source.dde_actions  # original untouched


def test_module_scoping_drops_other_modules_children(sample_pair):
    source, _ = sample_pair
    module = source.modules[1]
    options = CollectionOptions.everything().model_copy(update={"selected_module_guids": [module.guid]})

    scoped = apply_collection_options(source, options)

    assert [m.guid for m in scoped.modules] == [module.guid]
    assert scoped.fields
    assert {f.module_guid for f in scoped.fields} == {module.guid}
    assert {c.module_guid for c in scoped.calculated_fields} == {module.guid}
    assert {r.module_guid for r in scoped.dde_rules} == {module.guid}
    kept_rules = {r.guid for r in scoped.dde_rules}
    assert scoped.dde_actions
    assert {a.rule_guid for a in scoped.dde_actions} <= kept_rules
    # Data feed targets module 0, so it is dropped
    assert scoped.data_feeds == []
    # Kinds without a module stay
    assert scoped.roles == source.roles
    assert scoped.values_lists == source.values_lists


def test_options_accept_camel_case():
    options = CollectionOptions.model_validate({"includeDdeActions": True, "selectedModuleGuids": ["m1"]})
    assert options.include_dde_actions is True
    assert options.selected_module_guids == ["m1"]


def test_json_directory_repository(tmp_path, sample_pair):
    source, _ = sample_pair
    document = snapshot_document(source)
    document.pop("environmentName")
    (tmp_path / "dev.json").write_text(json.dumps(document), encoding="utf-8")
    repository = JsonDirectoryRepository(tmp_path)
    environment = Environment(id="dev", display_name="Development")

    snapshot = repository.load_snapshot_for(environment, CollectionOptions())

    assert snapshot.environment_name == "Development"
    assert len(snapshot.modules) == len(source.modules)
    assert snapshot.dde_actions == []
    assert repository.issues == []


def test_json_directory_repository_missing_environment(tmp_path):
    repository = JsonDirectoryRepository(tmp_path)
    with pytest.raises(FileNotFoundError):
        repository.load_snapshot_for(Environment(id="prod", display_name="Production"), CollectionOptions())
