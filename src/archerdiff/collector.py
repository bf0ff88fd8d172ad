"""Metadata collection boundary.

The engine never talks to an Archer instance. Callers obtain snapshots from
a ``MetadataRepository`` (live API client, recorded JSON exports, test
builders) and hand complete snapshots to ``archerdiff.api.compare``.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from archerdiff.codes import EntityKind
from archerdiff.contracts import EngineIssue
from archerdiff.kernel.metadata import SNAPSHOT_COLLECTIONS, MetadataSnapshot
from archerdiff._internal.io.snapshot import load_snapshot_from_path

logger = logging.getLogger(__name__)

# Kinds owned by a module through ``module_guid``.
MODULE_SCOPED_KINDS = (
    EntityKind.FIELD,
    EntityKind.CALCULATED_FIELD,
    EntityKind.LAYOUT,
    EntityKind.DDE_RULE,
    EntityKind.REPORT,
    EntityKind.SECURITY_PARAMETER,
    EntityKind.NOTIFICATION,
)


class Environment(BaseModel):
    """An Archer instance to collect from. Credentials are not modeled."""
    id: str
    display_name: str
    base_url: Optional[str] = None
    instance_name: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CollectionOptions(BaseModel):
    """Which collections to include, and optionally which modules.

    Values-list values and DDE actions are off by default: they are large
    and rarely needed for a first pass.
    """
    include_modules: bool = True
    include_fields: bool = True
    include_calculated_fields: bool = True
    include_layouts: bool = True
    include_values_lists: bool = True
    include_values_list_values: bool = False
    include_dde_rules: bool = True
    include_dde_actions: bool = False
    include_reports: bool = True
    include_dashboards: bool = True
    include_workspaces: bool = True
    include_i_views: bool = True
    include_roles: bool = True
    include_security_parameters: bool = True
    include_notifications: bool = True
    include_data_feeds: bool = True
    include_schedules: bool = True
    selected_module_guids: List[str] = []  # Empty = all modules

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def everything(cls) -> "CollectionOptions":
        return cls(**{f"include_{attr}": True for attr in SNAPSHOT_COLLECTIONS.values()})

    def includes(self, kind: EntityKind) -> bool:
        return getattr(self, f"include_{SNAPSHOT_COLLECTIONS[kind]}")

    def included_kinds(self) -> List[EntityKind]:
        return [kind for kind in SNAPSHOT_COLLECTIONS if self.includes(kind)]


class MetadataRepository(Protocol):
    """Source of complete snapshots for an environment."""

    def load_snapshot_for(
        self,
        environment: Environment,
        options: CollectionOptions,
    ) -> MetadataSnapshot:
        ...


def apply_collection_options(
    snapshot: MetadataSnapshot,
    options: CollectionOptions,
) -> MetadataSnapshot:
    """Return a copy of ``snapshot`` restricted to the selected collections.

    When modules are selected, module-scoped items of other modules are
    dropped (items with no module stay), and DDE actions follow their rules.
    """
    update: Dict[str, list] = {}
    for kind, attribute in SNAPSHOT_COLLECTIONS.items():
        update[attribute] = list(snapshot.items_for(kind)) if options.includes(kind) else []

    selected = set(options.selected_module_guids)
    if selected:
        update["modules"] = [m for m in update["modules"] if m.guid in selected]
        for kind in MODULE_SCOPED_KINDS:
            attribute = SNAPSHOT_COLLECTIONS[kind]
            update[attribute] = [
                item for item in update[attribute]
                if item.module_guid is None or item.module_guid in selected
            ]
        update["data_feeds"] = [
            feed for feed in update["data_feeds"]
            if feed.target_module_guid is None or feed.target_module_guid in selected
        ]
        kept_rules = {rule.guid for rule in update["dde_rules"]}
        update["dde_actions"] = [
            action for action in update["dde_actions"]
            if action.rule_guid is None or action.rule_guid in kept_rules
        ]

    return snapshot.model_copy(update=update)


class JsonDirectoryRepository:
    """Repository over exported snapshots: ``<root>/<environment id>.json``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.issues: List[EngineIssue] = []

    def path_for(self, environment: Environment) -> Path:
        return self.root / f"{environment.id}.json"

    def load_snapshot_for(
        self,
        environment: Environment,
        options: CollectionOptions,
    ) -> MetadataSnapshot:
        path = self.path_for(environment)
        if not path.exists():
            raise FileNotFoundError(f"No snapshot for environment '{environment.id}' at {path}")
        logger.info("Loading snapshot for %s from %s", environment.display_name, path)
        snapshot = load_snapshot_from_path(path, side=environment.id, issues=self.issues)
        snapshot = apply_collection_options(snapshot, options)
        if snapshot.environment_name is None:
            snapshot = snapshot.model_copy(update={"environment_name": environment.display_name})
        return snapshot
