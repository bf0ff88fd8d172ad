"""Pydantic models for collected Archer metadata.

One model per entity kind, all sharing the identity triple (local ``id``,
cross-environment ``guid``, display ``name``). Attributes are snake_case in
Python and camelCase on the wire (``isRequired``, ``moduleGuid``, ...), which
is also the property name reported in differences.

The tables at the bottom of this module are the static, per-kind view the
engine works from: which model validates a kind, which snapshot collection
holds it, and which attributes link it to its parent.
"""

from typing import Annotated, Dict, List, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from pydantic.alias_generators import to_camel

from archerdiff.codes import EntityKind


class MetadataBase(BaseModel):
    """Identity and descriptive attributes shared by every entity kind."""

    id: int  # Environment-local numeric id, never compared
    guid: str  # Stable cross-environment identifier
    name: str
    alias: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def kind(self) -> EntityKind:
        return EntityKind(self.type)


class Module(MetadataBase):
    type: Literal["Module"] = "Module"
    level_id: Optional[int] = None
    is_subform: bool = False
    parent_module_id: Optional[int] = None
    parent_module_guid: Optional[str] = None
    field_count: int = 0


class Field(MetadataBase):
    type: Literal["Field"] = "Field"
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None
    field_type: Optional[str] = None
    field_type_name: Optional[str] = None
    is_required: bool = False
    is_key: bool = False
    is_calculated: bool = False
    max_length: Optional[int] = None
    default_value: Optional[str] = None
    related_values_list_id: Optional[int] = None
    related_values_list_guid: Optional[str] = None
    calculation_formula: Optional[str] = None
    calculation_return_type: Optional[str] = None
    calculation_source_fields: Optional[List[str]] = None


class CalculatedField(Field):
    """A field whose value is derived from a formula.

    Collected into its own snapshot collection so formula drift can be
    counted and classified separately from ordinary field changes.
    """

    type: Literal["CalculatedField"] = "CalculatedField"
    is_calculated: bool = True


class Layout(MetadataBase):
    type: Literal["Layout"] = "Layout"
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None
    is_default: bool = False
    field_ids: List[int] = []
    field_guids: List[str] = []


class ValuesList(MetadataBase):
    type: Literal["ValuesList"] = "ValuesList"
    values_count: int = 0
    is_hierarchical: bool = False


class ValuesListValue(MetadataBase):
    type: Literal["ValuesListValue"] = "ValuesListValue"
    values_list_id: Optional[int] = None
    values_list_name: Optional[str] = None
    values_list_guid: Optional[str] = None
    numeric_value: Optional[int] = None
    sort_order: Optional[int] = None
    parent_value_id: Optional[int] = None
    is_selectable: bool = True


class DDERule(MetadataBase):
    type: Literal["DDERule"] = "DDERule"
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None
    is_enabled: bool = False
    trigger_type: Optional[str] = None
    actions_count: int = 0


class DDEAction(MetadataBase):
    type: Literal["DDEAction"] = "DDEAction"
    rule_id: Optional[int] = None
    rule_name: Optional[str] = None
    rule_guid: Optional[str] = None
    action_type: Optional[str] = None
    order: Optional[int] = None


class Report(MetadataBase):
    type: Literal["Report"] = "Report"
    report_type: Optional[str] = None
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None
    is_shared: bool = False
    owner: Optional[str] = None


class Dashboard(MetadataBase):
    type: Literal["Dashboard"] = "Dashboard"
    i_views_count: int = 0
    is_shared: bool = False
    owner: Optional[str] = None
    i_view_guids: List[str] = []


class Workspace(MetadataBase):
    type: Literal["Workspace"] = "Workspace"
    dashboards_count: int = 0
    order: Optional[int] = None
    dashboard_guids: List[str] = []


class IView(MetadataBase):
    type: Literal["iView"] = "iView"
    i_view_type: Optional[str] = None
    report_id: Optional[int] = None
    report_name: Optional[str] = None
    report_guid: Optional[str] = None


class Role(MetadataBase):
    type: Literal["Role"] = "Role"
    users_count: int = 0
    groups_count: int = 0
    is_system_role: bool = False
    permission_guids: List[str] = []


class SecurityParameter(MetadataBase):
    type: Literal["SecurityParameter"] = "SecurityParameter"
    security_type: Optional[str] = None
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None


class Notification(MetadataBase):
    type: Literal["Notification"] = "Notification"
    module_id: Optional[int] = None
    module_name: Optional[str] = None
    module_guid: Optional[str] = None
    is_enabled: bool = False
    trigger_type: Optional[str] = None


class DataFeed(MetadataBase):
    type: Literal["DataFeed"] = "DataFeed"
    feed_type: Optional[str] = None
    target_module_id: Optional[int] = None
    target_module_name: Optional[str] = None
    target_module_guid: Optional[str] = None
    is_enabled: bool = False
    schedule: Optional[str] = None


class Schedule(MetadataBase):
    type: Literal["Schedule"] = "Schedule"
    schedule_type: Optional[str] = None
    frequency: Optional[str] = None
    cron_expression: Optional[str] = None
    is_enabled: bool = False
    last_run_date: Optional[str] = None
    next_run_date: Optional[str] = None


MetadataItem = Annotated[
    Union[
        Module,
        Field,
        CalculatedField,
        Layout,
        ValuesList,
        ValuesListValue,
        DDERule,
        DDEAction,
        Report,
        Dashboard,
        Workspace,
        IView,
        Role,
        SecurityParameter,
        Notification,
        DataFeed,
        Schedule,
    ],
    PydanticField(discriminator="type"),
]


class MetadataSnapshot(BaseModel):
    """A complete typed capture of one environment's metadata.

    Every collection defaults to empty: a kind that was not collected simply
    yields no results for that kind.
    """

    environment_name: Optional[str] = None
    collected_at: Optional[str] = None
    modules: List[Module] = []
    fields: List[Field] = []
    calculated_fields: List[CalculatedField] = []
    layouts: List[Layout] = []
    values_lists: List[ValuesList] = []
    values_list_values: List[ValuesListValue] = []
    dde_rules: List[DDERule] = []
    dde_actions: List[DDEAction] = []
    reports: List[Report] = []
    dashboards: List[Dashboard] = []
    workspaces: List[Workspace] = []
    i_views: List[IView] = []
    roles: List[Role] = []
    security_parameters: List[SecurityParameter] = []
    notifications: List[Notification] = []
    data_feeds: List[DataFeed] = []
    schedules: List[Schedule] = []

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def items_for(self, kind: EntityKind) -> List[MetadataBase]:
        """Get the collection holding items of ``kind``."""
        return getattr(self, SNAPSHOT_COLLECTIONS[kind])

    def item_count(self) -> int:
        return sum(len(self.items_for(kind)) for kind in SNAPSHOT_COLLECTIONS)


# kind -> model, in canonical comparison order (parents first, for readability only)
KIND_MODELS: Dict[EntityKind, Type[MetadataBase]] = {
    EntityKind.MODULE: Module,
    EntityKind.FIELD: Field,
    EntityKind.CALCULATED_FIELD: CalculatedField,
    EntityKind.LAYOUT: Layout,
    EntityKind.VALUES_LIST: ValuesList,
    EntityKind.VALUES_LIST_VALUE: ValuesListValue,
    EntityKind.DDE_RULE: DDERule,
    EntityKind.DDE_ACTION: DDEAction,
    EntityKind.REPORT: Report,
    EntityKind.DASHBOARD: Dashboard,
    EntityKind.WORKSPACE: Workspace,
    EntityKind.IVIEW: IView,
    EntityKind.ROLE: Role,
    EntityKind.SECURITY_PARAMETER: SecurityParameter,
    EntityKind.NOTIFICATION: Notification,
    EntityKind.DATA_FEED: DataFeed,
    EntityKind.SCHEDULE: Schedule,
}

# kind -> MetadataSnapshot attribute
SNAPSHOT_COLLECTIONS: Dict[EntityKind, str] = {
    EntityKind.MODULE: "modules",
    EntityKind.FIELD: "fields",
    EntityKind.CALCULATED_FIELD: "calculated_fields",
    EntityKind.LAYOUT: "layouts",
    EntityKind.VALUES_LIST: "values_lists",
    EntityKind.VALUES_LIST_VALUE: "values_list_values",
    EntityKind.DDE_RULE: "dde_rules",
    EntityKind.DDE_ACTION: "dde_actions",
    EntityKind.REPORT: "reports",
    EntityKind.DASHBOARD: "dashboards",
    EntityKind.WORKSPACE: "workspaces",
    EntityKind.IVIEW: "i_views",
    EntityKind.ROLE: "roles",
    EntityKind.SECURITY_PARAMETER: "security_parameters",
    EntityKind.NOTIFICATION: "notifications",
    EntityKind.DATA_FEED: "data_feeds",
    EntityKind.SCHEDULE: "schedules",
}

# kind -> (parent name attribute, parent guid attribute)
# Kinds listed here carry their parent's name in the composite matching key.
PARENT_LINKS: Dict[EntityKind, Tuple[str, str]] = {
    EntityKind.FIELD: ("module_name", "module_guid"),
    EntityKind.CALCULATED_FIELD: ("module_name", "module_guid"),
    EntityKind.LAYOUT: ("module_name", "module_guid"),
    EntityKind.VALUES_LIST_VALUE: ("values_list_name", "values_list_guid"),
    EntityKind.DDE_RULE: ("module_name", "module_guid"),
    EntityKind.DDE_ACTION: ("rule_name", "rule_guid"),
    EntityKind.NOTIFICATION: ("module_name", "module_guid"),
    EntityKind.SECURITY_PARAMETER: ("module_name", "module_guid"),
}


def wire_name(model: Type[MetadataBase], attribute: str) -> str:
    """Get the camelCase wire name of a model attribute."""
    info = model.model_fields[attribute]
    return info.alias or attribute


def parent_name(item: MetadataBase) -> Optional[str]:
    """Get the display name of the item's owning item, if its kind has one."""
    link = PARENT_LINKS.get(item.kind)
    if link is None:
        return None
    return getattr(item, link[0])


def parent_guid(item: MetadataBase) -> Optional[str]:
    """Get the GUID of the item's owning item, if its kind has one."""
    link = PARENT_LINKS.get(item.kind)
    if link is None:
        return None
    return getattr(item, link[1])
