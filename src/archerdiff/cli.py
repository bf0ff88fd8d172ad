"""archerdiff CLI: compare two collected metadata snapshots."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path

EXIT_MATCH = 0
EXIT_DIFFERENCES = 1
EXIT_INPUT_ERROR = 2


def _configure_logging(args) -> None:
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_summary(report) -> None:
    summary = report.summary
    source = report.source_name or "Source"
    target = report.target_name or "Target"
    status = "DIFFERENCES FOUND" if report.has_differences else "ALL ITEMS MATCH"
    print(f"[{'!' if report.has_differences else 'OK'}] Comparison complete: {status}")
    print(f"  Items: {summary.total_items}")
    print(f"  Matched: {summary.matched_count}")
    print(f"  Mismatched: {summary.mismatched_count}")
    print(f"  Not in {target}: {summary.missing_in_target_count}")
    print(f"  Not in {source}: {summary.missing_in_source_count}")
    stats = summary.calculated_field_stats
    if stats.mismatched:
        print(f"  Calculated fields with formula differences: {stats.formula_differences}")
    if report.issues:
        print(f"  Issues: {len(report.issues)}")


def _run_compare(args) -> int:
    from .api import compare
    from .contracts import ComparisonOptions
    from .kernel.matcher import IdentityStrategy
    from .reporting import write_reports
    from ._internal.io.snapshot import SnapshotLoadError

    try:
        options = ComparisonOptions(strategy=IdentityStrategy(args.strategy))
        report = compare(args.source, args.target, options=options)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except SnapshotLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.source_name or args.target_name:
        report = report.model_copy(update={
            "source_name": args.source_name or report.source_name,
            "target_name": args.target_name or report.target_name,
        })

    if args.output_dir is not None:
        formats = args.format or ["markdown", "json"]
        written = write_reports(report, Path(args.output_dir), formats=formats)
        if not args.quiet:
            for fmt, path in written.items():
                print(f"  {fmt}: {path}")

    if not args.quiet:
        _print_summary(report)

    return EXIT_DIFFERENCES if report.has_differences else EXIT_MATCH


def _run_sample(args) -> int:
    from ._internal.sample_data import build_sample_pair, snapshot_document

    source, target = build_sample_pair(
        seed=args.seed,
        introduce_mismatches=not args.no_mismatches,
        introduce_formula_differences=not args.no_formula_differences,
    )
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, snapshot in (("source.json", source), ("target.json", target)):
        path = out_dir / name
        path.write_text(json.dumps(snapshot_document(snapshot), indent=2) + "\n", encoding="utf-8")

    if not args.quiet:
        print("[OK] Sample snapshots written")
        print(f"  Source: {out_dir / 'source.json'} ({source.item_count()} items)")
        print(f"  Target: {out_dir / 'target.json'} ({target.item_count()} items)")
    return EXIT_MATCH


def main():
    """Main CLI entry point for archerdiff commands."""
    try:
        archerdiff_version = get_version("archerdiff")
    except PackageNotFoundError:
        archerdiff_version = "dev"

    parser = argparse.ArgumentParser(
        prog="archerdiff",
        description="archerdiff: GUID-keyed comparison of Archer GRC metadata between environments"
    )
    parser.add_argument("--version", action="version", version=f"archerdiff {archerdiff_version}")
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare a source snapshot against a target snapshot",
        parents=[parent_parser]
    )
    compare_parser.add_argument(
        "--source",
        type=Path,
        required=True,
        help="Path to source snapshot JSON"
    )
    compare_parser.add_argument(
        "--target",
        type=Path,
        required=True,
        help="Path to target snapshot JSON"
    )
    compare_parser.add_argument(
        "--strategy",
        choices=["guid", "composite"],
        default="guid",
        help="Identity strategy: guid (default) or composite (parent + name)"
    )
    compare_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory for reports (nothing is written when omitted)"
    )
    compare_parser.add_argument(
        "--format",
        choices=["markdown", "json", "csv", "xlsx"],
        action="append",
        default=None,
        help="Report format; repeat for several (defaults to markdown and json)"
    )
    compare_parser.add_argument(
        "--source-name",
        default=None,
        help="Display name for the source environment"
    )
    compare_parser.add_argument(
        "--target-name",
        default=None,
        help="Display name for the target environment"
    )

    sample_parser = subparsers.add_parser(
        "sample",
        help="Write a deterministic source/target sample pair",
        parents=[parent_parser]
    )
    sample_parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Output directory for source.json and target.json"
    )
    sample_parser.add_argument(
        "--seed",
        type=int,
        default=7,
        help="Seed for identifiers and ordering"
    )
    sample_parser.add_argument(
        "--no-mismatches",
        action="store_true",
        help="Do not introduce property mismatches in the target"
    )
    sample_parser.add_argument(
        "--no-formula-differences",
        action="store_true",
        help="Do not alter calculated field formulas in the target"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_INPUT_ERROR)

    _configure_logging(args)

    if args.command == "compare":
        sys.exit(_run_compare(args))
    elif args.command == "sample":
        try:
            sys.exit(_run_sample(args))
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(EXIT_INPUT_ERROR)


if __name__ == "__main__":
    main()
