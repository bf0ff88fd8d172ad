"""Deterministic sample snapshots (internal).

Builds a source/target pair that exercises every entity kind: shared items,
source-only and target-only items, environment-local id drift, reordered
arrays, and (optionally) real mismatches and formula differences.

Everything is derived from the explicit ``seed``: GUIDs are uuid5 values
under a seed-specific namespace, and the only randomness (array ordering)
comes from a ``random.Random`` seeded per side. Two calls with the same
arguments produce equal snapshots.
"""

import random
import uuid
from typing import Dict, List, Tuple

from archerdiff.kernel.metadata import (
    CalculatedField,
    Dashboard,
    DataFeed,
    DDEAction,
    DDERule,
    Field,
    IView,
    Layout,
    MetadataSnapshot,
    Module,
    Notification,
    Report,
    Role,
    Schedule,
    SecurityParameter,
    ValuesList,
    ValuesListValue,
    Workspace,
)

MODULE_NAMES = (
    "Incident Management",
    "Risk Register",
    "Policy Management",
    "Vendor Assessment",
    "Business Continuity",
)

FIELD_NAMES = (
    "Title", "Description", "Status", "Priority", "Owner", "Due Date",
)

FIELD_TYPES = ("Text", "Text", "ValuesList", "ValuesList", "UsersGroups", "DateField")

CALCULATION_FORMULAS = (
    ("Risk Score", '[Impact] * [Likelihood]'),
    ("Open Flag", 'IF([Status]="Open", 1, 0)'),
)

VALUES_LISTS = {
    "Status": ("Open", "In Progress", "Closed"),
    "Priority": ("Low", "Medium", "High"),
    "Impact": ("Minor", "Moderate", "Severe"),
}

ROLES = (
    ("Administrator", True),
    ("Risk Manager", False),
    ("Auditor", False),
)


class _Guids:
    def __init__(self, seed: int):
        self.namespace = uuid.uuid5(uuid.NAMESPACE_URL, f"archerdiff-sample:{seed}")

    def __call__(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "/".join(parts)))


def _alias(name: str) -> str:
    return name.replace(" ", "_").lower()


def build_sample_snapshot(
    seed: int = 7,
    is_source: bool = True,
    introduce_mismatches: bool = True,
    introduce_formula_differences: bool = True,
) -> MetadataSnapshot:
    """Build one side of the sample pair.

    Args:
        seed: Seed for GUIDs and array ordering
        is_source: Build the source side (False builds the target side)
        introduce_mismatches: Target side drifts on a few properties
        introduce_formula_differences: Target side alters some formulas

    Returns:
        A complete MetadataSnapshot
    """
    guid = _Guids(seed)
    rng = random.Random(f"{seed}:{'source' if is_source else 'target'}")
    drift = not is_source and introduce_mismatches
    formula_drift = not is_source and introduce_formula_differences
    id_base = 1 if is_source else 501  # Local ids never line up across environments

    modules: List[Module] = []
    fields: List[Field] = []
    calculated: List[CalculatedField] = []
    layouts: List[Layout] = []
    rules: List[DDERule] = []
    actions: List[DDEAction] = []
    reports: List[Report] = []
    notifications: List[Notification] = []

    for m_index, module_name in enumerate(MODULE_NAMES):
        module_guid = guid("module", module_name)
        module_id = id_base + m_index
        module_fields: List[Field] = []

        for f_index, field_name in enumerate(FIELD_NAMES):
            description = f"{field_name} for {module_name}"
            is_required = f_index < 3
            if drift and m_index == 2 and f_index == 1:
                description = f"  {description.upper()} "  # Whitespace/case only: still a match
            if drift and m_index == 1 and f_index == 2:
                is_required = False
            module_fields.append(Field(
                id=id_base * 100 + m_index * 10 + f_index,
                guid=guid("field", module_name, field_name),
                name=field_name,
                alias=f"{_alias(module_name)}_{_alias(field_name)}",
                description=description,
                module_id=module_id,
                module_name=module_name,
                module_guid=module_guid,
                field_type=FIELD_TYPES[f_index],
                is_required=is_required,
                is_key=f_index == 0,
                max_length=500 if FIELD_TYPES[f_index] == "Text" else None,
            ))

        # One field per side that the other side does not have
        extra_name = "Legacy Code" if is_source else "Review Cycle"
        if m_index == 0:
            module_fields.append(Field(
                id=id_base * 100 + 99,
                guid=guid("field", module_name, extra_name),
                name=extra_name,
                module_id=module_id,
                module_name=module_name,
                module_guid=module_guid,
                field_type="Text",
            ))

        for c_index, (calc_name, formula) in enumerate(CALCULATION_FORMULAS):
            if formula_drift and m_index % 2 == 0 and c_index == 1:
                formula = formula.replace("IF(", "IIF(") + " /* modified */"
            calculated.append(CalculatedField(
                id=id_base * 100 + m_index * 10 + 7 + c_index,
                guid=guid("calculated", module_name, calc_name),
                name=calc_name,
                alias=f"{_alias(module_name)}_{_alias(calc_name)}",
                module_id=module_id,
                module_name=module_name,
                module_guid=module_guid,
                field_type="CalculatedField",
                field_type_name="Calculated",
                calculation_formula=formula,
                calculation_return_type="Numeric",
                calculation_source_fields=[f.guid for f in module_fields[2:4]],
            ))

        modules.append(Module(
            id=module_id,
            guid=module_guid,
            name=module_name,
            alias=_alias(module_name),
            description=f"{module_name} application for GRC management",
            level_id=100 + module_id,
            is_subform=False,
            field_count=len(module_fields),
        ))
        fields.extend(module_fields)

        layout_guids = [f.guid for f in module_fields if f.name != extra_name]
        rng.shuffle(layout_guids)  # Order differs per side; compared as a set
        layouts.append(Layout(
            id=id_base + m_index,
            guid=guid("layout", module_name),
            name=f"{module_name} Default Layout",
            module_id=module_id,
            module_name=module_name,
            module_guid=module_guid,
            is_default=True,
            field_ids=[f.id for f in module_fields],
            field_guids=layout_guids,
        ))

        rule_guid = guid("rule", module_name)
        rule_name = f"{module_name} Status Rule"
        rules.append(DDERule(
            id=id_base + m_index,
            guid=rule_guid,
            name=rule_name,
            module_id=module_id,
            module_name=module_name,
            module_guid=module_guid,
            is_enabled=not (drift and m_index == 3),
            trigger_type="OnSave",
            actions_count=2,
        ))
        for a_index, action_type in enumerate(("SetValue", "SendNotification")):
            actions.append(DDEAction(
                id=id_base * 10 + m_index * 2 + a_index,
                guid=guid("action", module_name, action_type),
                name=f"{rule_name} - {action_type}",
                rule_id=id_base + m_index,
                rule_name=rule_name,
                rule_guid=rule_guid,
                action_type=action_type,
                order=a_index + 1,
            ))

        reports.append(Report(
            id=id_base + m_index,
            guid=guid("report", module_name),
            name=f"{module_name} Summary",
            report_type="Statistical",
            module_id=module_id,
            module_name=module_name,
            module_guid=module_guid,
            is_shared=True,
            owner="admin",
        ))

        if m_index < 3:
            notifications.append(Notification(
                id=id_base + m_index,
                guid=guid("notification", module_name),
                name=f"{module_name} Alert",
                module_id=module_id,
                module_name=module_name,
                module_guid=module_guid,
                is_enabled=True,
                trigger_type="OnCreate",
            ))

    values_lists: List[ValuesList] = []
    values: List[ValuesListValue] = []
    for l_index, (list_name, list_values) in enumerate(VALUES_LISTS.items()):
        list_guid = guid("values-list", list_name)
        values_lists.append(ValuesList(
            id=id_base + l_index,
            guid=list_guid,
            name=list_name,
            values_count=len(list_values),
            is_hierarchical=False,
        ))
        for v_index, value_name in enumerate(list_values):
            values.append(ValuesListValue(
                id=id_base * 10 + l_index * 5 + v_index,
                guid=guid("value", list_name, value_name),
                name=value_name,
                values_list_id=id_base + l_index,
                values_list_name=list_name,
                values_list_guid=list_guid,
                numeric_value=v_index + 1,
                sort_order=v_index + 1,
                is_selectable=True,
            ))

    iviews = [
        IView(id=id_base, guid=guid("iview", "Risk Heat Map"), name="Risk Heat Map",
              i_view_type="Chart", report_guid=reports[1].guid, report_name=reports[1].name),
        IView(id=id_base + 1, guid=guid("iview", "Incident Trend"), name="Incident Trend",
              i_view_type="LineChart" if not drift else "BarChart"),
    ]
    dashboards = [
        Dashboard(id=id_base, guid=guid("dashboard", "Executive"), name="Executive Dashboard",
                  i_views_count=2, is_shared=True, owner="admin",
                  i_view_guids=[v.guid for v in iviews]),
    ]
    workspaces = [
        Workspace(id=id_base, guid=guid("workspace", "GRC"), name="GRC Workspace",
                  dashboards_count=1, order=1, dashboard_guids=[d.guid for d in dashboards]),
    ]

    roles: List[Role] = []
    for r_index, (role_name, is_system) in enumerate(ROLES):
        permissions = [guid("permission", role_name, str(p)) for p in range(4)]
        rng.shuffle(permissions)
        roles.append(Role(
            id=id_base + r_index,
            guid=guid("role", role_name),
            name=role_name,
            alias=_alias(role_name),
            users_count=3 + r_index,
            groups_count=1,
            is_system_role=is_system,
            permission_guids=permissions,
        ))

    security_parameters = [
        SecurityParameter(id=id_base, guid=guid("security", "Record-Level Security"),
                          name="Record-Level Security", security_type="RecordPermissions"),
    ]
    data_feeds = [
        DataFeed(id=id_base, guid=guid("feed", "Vulnerability Import"), name="Vulnerability Import",
                 feed_type="Import", target_module_id=modules[0].id,
                 target_module_name=modules[0].name, target_module_guid=modules[0].guid,
                 is_enabled=True, schedule="Daily at 2:00 AM"),
    ]
    schedules = [
        Schedule(id=id_base, guid=guid("schedule", "Daily Report"), name="Daily Report Schedule",
                 schedule_type="Report", frequency="Daily", cron_expression="0 6 * * *",
                 is_enabled=True),
    ]

    return MetadataSnapshot(
        environment_name="Development" if is_source else "Production",
        modules=modules,
        fields=fields,
        calculated_fields=calculated,
        layouts=layouts,
        values_lists=values_lists,
        values_list_values=values,
        dde_rules=rules,
        dde_actions=actions,
        reports=reports,
        dashboards=dashboards,
        workspaces=workspaces,
        i_views=iviews,
        roles=roles,
        security_parameters=security_parameters,
        notifications=notifications,
        data_feeds=data_feeds,
        schedules=schedules,
    )


def build_sample_pair(
    seed: int = 7,
    introduce_mismatches: bool = True,
    introduce_formula_differences: bool = True,
) -> Tuple[MetadataSnapshot, MetadataSnapshot]:
    """Build a (source, target) sample pair from one seed."""
    source = build_sample_snapshot(seed, True, introduce_mismatches, introduce_formula_differences)
    target = build_sample_snapshot(seed, False, introduce_mismatches, introduce_formula_differences)
    return source, target


def snapshot_document(snapshot: MetadataSnapshot) -> Dict:
    """Serialize a snapshot to the camelCase document the loader reads."""
    return snapshot.model_dump(mode="json", by_alias=True)
