"""Report generation: flattened rows, markdown, JSON, CSV and Excel.

The engine emits one result per item identity. Exporters may flatten a
mismatch into one row per property difference for display; that never
changes the summary counts.
"""

import csv
import json
import logging
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from archerdiff.api import ComparisonReport
from archerdiff.codes import ComparisonStatus, EntityKind
from archerdiff.contracts import ComparisonResult, ComparisonSummary
from archerdiff._internal.report_contract import (
    DEFAULT_SOURCE_NAME,
    DEFAULT_TARGET_NAME,
    ENVIRONMENT_NAME_IN_SHEET,
    FLAT_COLUMNS,
    INVALID_SHEET_CHARS,
    MAX_SHEET_NAME,
    NO_VALUE,
    NOT_PRESENT,
    PRESENT,
    REPORT_SCHEMA_VERSION,
)

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("markdown", "json", "csv", "xlsx")

_FILE_NAMES = {
    "markdown": "comparison.md",
    "json": "comparison.json",
    "csv": "comparison.csv",
    "xlsx": "comparison.xlsx",
}


def _names(report: ComparisonReport, source_name: Optional[str], target_name: Optional[str]):
    return (
        source_name or report.source_name or DEFAULT_SOURCE_NAME,
        target_name or report.target_name or DEFAULT_TARGET_NAME,
    )


def _percent(count: int, total: int) -> str:
    if total == 0:
        return "0.0%"
    return f"{count / total * 100:.1f}%"


def _placeholder(result: ComparisonResult, side: str) -> str:
    missing = (
        ComparisonStatus.MISSING_IN_SOURCE if side == "source"
        else ComparisonStatus.MISSING_IN_TARGET
    )
    return NOT_PRESENT if result.status == missing else PRESENT


def flatten_results(results: Iterable[ComparisonResult]) -> List[Dict[str, Any]]:
    """One row per property difference for mismatches, one row per result otherwise."""
    rows: List[Dict[str, Any]] = []
    for result in results:
        base = {
            "type": result.comparison_type.value,
            "parent": result.parent_name or NO_VALUE,
            "itemName": result.item_name,
            "itemIdentifier": result.item_identifier,
            "itemGuid": result.item_guid,
            "status": result.status.value,
            "severity": result.severity.value,
        }
        if result.property_differences:
            for diff in result.property_differences:
                rows.append({
                    **base,
                    "property": diff.property_name,
                    "sourceValue": diff.source_value,
                    "targetValue": diff.target_value,
                    "isCalculationDifference": diff.is_calculation_difference,
                })
        else:
            rows.append({
                **base,
                "property": NO_VALUE,
                "sourceValue": _placeholder(result, "source"),
                "targetValue": _placeholder(result, "target"),
                "isCalculationDifference": False,
            })
    return rows


def _group_by_kind(results: Sequence[ComparisonResult]) -> "OrderedDict[EntityKind, List[ComparisonResult]]":
    grouped: "OrderedDict[EntityKind, List[ComparisonResult]]" = OrderedDict()
    for result in results:
        grouped.setdefault(result.comparison_type, []).append(result)
    return grouped


def _summary_lines(summary: ComparisonSummary, source_name: str, target_name: str) -> List[str]:
    total = summary.total_items
    return [
        f"- **Total Items**: {total}",
        f"- **Matched**: {summary.matched_count} ({_percent(summary.matched_count, total)})",
        f"- **Mismatched**: {summary.mismatched_count} ({_percent(summary.mismatched_count, total)})",
        f"- **Missing in Source** (only in {target_name}): {summary.missing_in_source_count}"
        f" ({_percent(summary.missing_in_source_count, total)})",
        f"- **Missing in Target** (only in {source_name}): {summary.missing_in_target_count}"
        f" ({_percent(summary.missing_in_target_count, total)})",
    ]


def generate_markdown_report(
    report: ComparisonReport,
    source_name: Optional[str] = None,
    target_name: Optional[str] = None,
    include_matches: bool = False,
) -> str:
    """Generate a hierarchical, human-readable comparison report."""
    source_name, target_name = _names(report, source_name, target_name)
    summary = report.summary
    lines: List[str] = []

    lines.append("# Archer Metadata Comparison Report")
    lines.append("")
    lines.append(f"Generated: {datetime.now(timezone.utc).isoformat()}")
    lines.append(f"Source: {source_name}")
    lines.append(f"Target: {target_name}")
    lines.append(f"Matching: {report.options.strategy.value}")
    lines.append("")

    if report.has_differences:
        lines.append("## [!] Status: DIFFERENCES FOUND")
    else:
        lines.append("## [OK] Status: ALL ITEMS MATCH")
    lines.append("")

    lines.append("### Summary")
    lines.append("")
    lines.extend(_summary_lines(summary, source_name, target_name))
    severity_counts = ", ".join(f"{sev.value}: {count}" for sev, count in summary.by_severity.items())
    lines.append(f"- **By Severity**: {severity_counts}")
    lines.append("")

    lines.append("### Breakdown by Type")
    lines.append("")
    lines.append("| Type | Total | Matched | Mismatched | Missing in Source | Missing in Target |")
    lines.append("|---|---|---|---|---|---|")
    for kind, counts in summary.by_type.items():
        if counts.total == 0:
            continue
        lines.append(
            f"| {kind.value} | {counts.total} | {counts.matched} | {counts.mismatched} "
            f"| {counts.missing_in_source} | {counts.missing_in_target} |"
        )
    lines.append("")

    calc = summary.calculated_field_stats
    if summary.by_type[EntityKind.CALCULATED_FIELD].total:
        lines.append("### Calculated Fields")
        lines.append("")
        lines.append(f"- Matched: {calc.matched}")
        lines.append(f"- Mismatched: {calc.mismatched}")
        lines.append(f"- Formula differences: {calc.formula_differences}")
        lines.append("")

    if report.issues:
        lines.append("### Issues")
        lines.append("")
        for issue in report.issues:
            scope = f" [{issue.entity_kind.value}]" if issue.entity_kind else ""
            side = f" ({issue.side})" if issue.side else ""
            lines.append(f"- `{issue.code.value}`{scope}{side}: {issue.message}")
        lines.append("")

    shown = [
        r for r in report.results
        if include_matches or r.status != ComparisonStatus.MATCH
    ]
    if shown:
        lines.append("## Details")
        lines.append("")
    for kind, results in _group_by_kind(shown).items():
        lines.append(f"### {kind.value} ({len(results)})")
        lines.append("")
        by_parent: "OrderedDict[str, List[ComparisonResult]]" = OrderedDict()
        for result in results:
            by_parent.setdefault(result.parent_name or "", []).append(result)
        for parent, children in by_parent.items():
            indent = ""
            if parent:
                lines.append(f"- **{parent}**")
                indent = "  "
            for result in children:
                lines.append(
                    f"{indent}- [{result.severity.value}] {result.item_name} "
                    f"({result.status.value}) `{result.item_guid}`"
                )
                for diff in result.property_differences:
                    if diff.is_calculation_difference:
                        lines.append(f"{indent}  - {diff.property_name} (formula):")
                        lines.append(f"{indent}    - {source_name}: `{diff.source_value}`")
                        lines.append(f"{indent}    - {target_name}: `{diff.target_value}`")
                    else:
                        lines.append(
                            f"{indent}  - {diff.property_name}: "
                            f"\"{diff.source_value}\" -> \"{diff.target_value}\""
                        )
        lines.append("")

    return "\n".join(lines)


def generate_json_report(report: ComparisonReport, include_items: bool = False) -> Dict[str, Any]:
    """Generate a camelCase JSON-ready report dict.

    Source/target items are omitted unless ``include_items`` is set.
    """
    exclude = None
    if not include_items:
        exclude = {"results": {"__all__": {"source_item", "target_item"}}}
    body = report.model_dump(mode="json", by_alias=True, exclude=exclude)
    return {"reportSchemaVersion": REPORT_SCHEMA_VERSION, **body}


def write_csv_report(report: ComparisonReport, path: Path) -> Path:
    """Write one row per flattened result to a CSV file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(FLAT_COLUMNS))
        writer.writeheader()
        for row in flatten_results(report.results):
            writer.writerow(row)
    return path


# Excel styling
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1E40AF", end_color="1E40AF", fill_type="solid")
TITLE_FONT = Font(bold=True, size=14)
SECTION_FONT = Font(bold=True)
STATUS_FILLS = {
    ComparisonStatus.MATCH: PatternFill(start_color="DCFCE7", end_color="DCFCE7", fill_type="solid"),
    ComparisonStatus.MISMATCH: PatternFill(start_color="FEF9C3", end_color="FEF9C3", fill_type="solid"),
    ComparisonStatus.MISSING_IN_SOURCE: PatternFill(start_color="FFEDD5", end_color="FFEDD5", fill_type="solid"),
    ComparisonStatus.MISSING_IN_TARGET: PatternFill(start_color="FEE2E2", end_color="FEE2E2", fill_type="solid"),
}


def sheet_title(name: str, used: Optional[set] = None) -> str:
    """Make a valid, unique worksheet title (max 31 chars, no []:*?/\\)."""
    name = ILLEGAL_CHARACTERS_RE.sub("", name)
    cleaned = "".join("_" if ch in INVALID_SHEET_CHARS else ch for ch in name)[:MAX_SHEET_NAME]
    cleaned = cleaned or "Sheet"
    if used is None:
        return cleaned
    candidate = cleaned
    counter = 2
    while candidate in used:
        suffix = f" ({counter})"
        candidate = cleaned[:MAX_SHEET_NAME - len(suffix)] + suffix
        counter += 1
    used.add(candidate)
    return candidate


def _set_cell(ws, row: int, column: int, value: Any):
    """Write a value as data: control characters are dropped and text
    starting with "=" stays text instead of becoming a formula."""
    if isinstance(value, str):
        value = ILLEGAL_CHARACTERS_RE.sub("", value)
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        cell.data_type = "s"
    return cell


def _write_table(ws, headers: Sequence[str], rows: Iterable[Sequence[Any]], widths: Sequence[int],
                 statuses: Optional[Sequence[ComparisonStatus]] = None) -> None:
    for col_idx, (header, width) in enumerate(zip(headers, widths), start=1):
        cell = _set_cell(ws, 1, col_idx, header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    ws.freeze_panes = "A2"

    row_count = 0
    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(row, start=1):
            cell = _set_cell(ws, row_idx, col_idx, value)
            if statuses is not None:
                cell.fill = STATUS_FILLS[statuses[row_idx - 2]]
        row_count += 1
    ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{row_count + 1}"


def _write_summary_sheet(ws, report: ComparisonReport, source_name: str, target_name: str) -> None:
    summary = report.summary
    total = summary.total_items
    data: List[List[Any]] = [
        ["Archer Metadata Comparison Report"],
        [],
        ["Source Environment:", source_name],
        ["Target Environment:", target_name],
        ["Generated:", datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")],
        ["Matching:", report.options.strategy.value],
        [],
        ["Overall Summary"],
        ["Metric", "Count", "Percentage"],
        ["Total Items", total, "100%" if total else "0.0%"],
        ["Matched", summary.matched_count, _percent(summary.matched_count, total)],
        ["Mismatched", summary.mismatched_count, _percent(summary.mismatched_count, total)],
        [f"Missing in Source ({source_name})", summary.missing_in_source_count,
         _percent(summary.missing_in_source_count, total)],
        [f"Missing in Target ({target_name})", summary.missing_in_target_count,
         _percent(summary.missing_in_target_count, total)],
        [],
        ["Breakdown by Type"],
        ["Type", "Total", "Matched", "Mismatched", "Missing in Source", "Missing in Target"],
    ]
    for kind, counts in summary.by_type.items():
        if counts.total > 0:
            data.append([
                kind.value, counts.total, counts.matched, counts.mismatched,
                counts.missing_in_source, counts.missing_in_target,
            ])
    calc = summary.calculated_field_stats
    data.extend([
        [],
        ["Calculated Fields"],
        ["Matched", calc.matched],
        ["Mismatched", calc.mismatched],
        ["Formula Differences", calc.formula_differences],
    ])

    for row_idx, row in enumerate(data, start=1):
        for col_idx, value in enumerate(row, start=1):
            _set_cell(ws, row_idx, col_idx, value)
    ws["A1"].font = TITLE_FONT
    for row in ws.iter_rows(min_col=1, max_col=1):
        cell = row[0]
        if cell.value in ("Overall Summary", "Breakdown by Type", "Calculated Fields", "Metric", "Type"):
            cell.font = SECTION_FONT
    for col_idx, width in enumerate((30, 15, 15, 15, 20, 20), start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width


def write_excel_report(
    report: ComparisonReport,
    path: Path,
    source_name: Optional[str] = None,
    target_name: Optional[str] = None,
) -> Path:
    """Write the comparison workbook.

    Sheets: Summary, one per non-empty status, one per non-empty kind.
    """
    source_name, target_name = _names(report, source_name, target_name)
    logger.info("Generating comparison workbook: %s", path)

    wb = Workbook()
    used: set = set()
    summary_ws = wb.active
    summary_ws.title = sheet_title("Summary", used)
    _write_summary_sheet(summary_ws, report, source_name, target_name)

    status_sheets = (
        (ComparisonStatus.MISSING_IN_TARGET, f"Not in {target_name[:ENVIRONMENT_NAME_IN_SHEET]}"),
        (ComparisonStatus.MISSING_IN_SOURCE, f"Not in {source_name[:ENVIRONMENT_NAME_IN_SHEET]}"),
        (ComparisonStatus.MISMATCH, "Mismatches"),
        (ComparisonStatus.MATCH, "Matched"),
    )
    for status, title in status_sheets:
        results = report.by_status(status)
        if not results:
            continue
        ws = wb.create_sheet(sheet_title(title, used))
        if status == ComparisonStatus.MISMATCH:
            headers = ["Type", "Parent", "Item Name", "Property",
                       f"{source_name} Value", f"{target_name} Value", "Severity"]
            rows = [
                [row["type"], row["parent"], row["itemName"], row["property"],
                 row["sourceValue"], row["targetValue"], row["severity"]]
                for row in flatten_results(results)
            ]
            _write_table(ws, headers, rows, (20, 25, 30, 20, 25, 25, 12))
        else:
            headers = ["Type", "Parent", "Item Name", "GUID", "Severity"]
            rows = [
                [r.comparison_type.value, r.parent_name or NO_VALUE, r.item_name, r.item_guid, r.severity.value]
                for r in results
            ]
            _write_table(ws, headers, rows, (20, 25, 40, 38, 12))

    for kind, results in _group_by_kind(report.results).items():
        ws = wb.create_sheet(sheet_title(kind.value, used))
        headers = ["Item Name", "Parent", "Status", "Property", source_name, target_name, "Severity"]
        flat = flatten_results(results)
        rows = [
            [row["itemName"], row["parent"], row["status"], row["property"],
             row["sourceValue"], row["targetValue"], row["severity"]]
            for row in flat
        ]
        statuses = [ComparisonStatus(row["status"]) for row in flat]
        _write_table(ws, headers, rows, (30, 25, 18, 20, 25, 25, 12), statuses=statuses)

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info("Comparison workbook saved: %s (%d results)", path, len(report.results))
    return path


def write_reports(
    report: ComparisonReport,
    output_dir: Path,
    formats: Sequence[str] = ("markdown", "json"),
    source_name: Optional[str] = None,
    target_name: Optional[str] = None,
) -> Dict[str, Path]:
    """Write each requested format into ``output_dir``; returns format -> path."""
    unknown = [fmt for fmt in formats if fmt not in REPORT_FORMATS]
    if unknown:
        raise ValueError(f"Unknown report format(s): {', '.join(unknown)}")

    output_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}
    for fmt in formats:
        path = output_dir / _FILE_NAMES[fmt]
        if fmt == "markdown":
            path.write_text(generate_markdown_report(report, source_name, target_name), encoding="utf-8")
        elif fmt == "json":
            content = json.dumps(generate_json_report(report), indent=2, ensure_ascii=False)
            path.write_text(content + "\n", encoding="utf-8")
        elif fmt == "csv":
            write_csv_report(report, path)
        elif fmt == "xlsx":
            write_excel_report(report, path, source_name, target_name)
        written[fmt] = path
    return written
