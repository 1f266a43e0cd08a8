"""Command-line entry point.

Usage:
    # Full backup: dashboard + JSON dump into ./exports
    finance-backup export all

    # Financial subset with per-table CSVs, written elsewhere
    finance-backup export financial --out /tmp/backups --csv expenses loans

    # Re-render a report offline from an earlier dump or dashboard
    finance-backup report exports/blessin-finance-backup-2024-01-15T10-30-45.json
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from finance_backup.config import settings
from finance_backup.logger import configure_logging, get_logger
from finance_backup.models import BACKUP_TABLES, ExportScope, TableName
from finance_backup.schemas import ExportOptions, ExportOutcome
from finance_backup.services.backup_service import BackupService, rehydrate_report
from finance_backup.services.data_sources import build_data_source
from finance_backup.services.rehydration import RehydrationError
from finance_backup.services.sinks import LocalDirectorySink, build_sink
from finance_backup.services.table_fetcher import TableFetcher

logger = get_logger(__name__)

SCOPES = {
    "all": ExportScope.FULL,
    "financial": ExportScope.FINANCIAL,
    "sales": ExportScope.SALES,
}
TABLE_CHOICES = [table.value for table in BACKUP_TABLES]


def build_service(out_dir: str | None) -> BackupService:
    sink = LocalDirectorySink(out_dir) if out_dir else build_sink()
    return BackupService(TableFetcher(build_data_source()), sink)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finance-backup",
        description="Export Blessin Finance tables and render interactive reports.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    export = commands.add_parser("export", help="Fetch tables and write backup artifacts")
    export.add_argument("scope", choices=sorted(SCOPES), help="Which tables to export")
    export.add_argument("--out", help="Output directory (default: configured sink)")
    export.add_argument(
        "--csv",
        nargs="*",
        choices=TABLE_CHOICES,
        default=None,
        metavar="TABLE",
        help="Tables to also write as CSV",
    )
    export.add_argument(
        "--sql",
        nargs="*",
        choices=TABLE_CHOICES,
        default=[],
        metavar="TABLE",
        help="Tables to also write as SQL inserts",
    )
    export.add_argument("--no-dashboard", action="store_true", help="Skip the HTML dashboard")
    export.add_argument("--no-json", action="store_true", help="Skip the full JSON dump")
    export.add_argument("--business-report", action="store_true", help="Also write a markdown report")

    report = commands.add_parser("report", help="Render a report from an exported file")
    report.add_argument("file", type=Path, help="JSON dump or dashboard HTML")
    report.add_argument("--out", type=Path, help="Output HTML path (default: <file>-report.html)")
    report.add_argument("--search", help="Pre-filter every listing")
    return parser


def _options(args: argparse.Namespace) -> ExportOptions:
    csv_tables = args.csv if args.csv is not None else settings.default_csv_tables
    return ExportOptions(
        include_dashboard=not args.no_dashboard,
        include_full_dump=not args.no_json,
        include_business_report=args.business_report,
        per_table_csv={TableName(name) for name in csv_tables if name in TABLE_CHOICES},
        per_table_sql={TableName(name) for name in args.sql},
    )


def _print_outcome(outcome: ExportOutcome) -> None:
    if not outcome.ok or outcome.summary is None:
        print(f"❌ Backup failed: {outcome.error}", file=sys.stderr)
        return
    summary = outcome.summary
    print("✅ Backup completed successfully!")
    print(f"   Tables: {summary.table_count}")
    print(f"   Records: {summary.total_records:,}")
    print(f"   Size: {summary.human_size}")
    print("   Files:")
    for filename in summary.filenames:
        print(f"   - {filename}")


async def _export(args: argparse.Namespace) -> int:
    service = build_service(args.out)
    outcome = await service.export(SCOPES[args.scope], _options(args))
    _print_outcome(outcome)
    return 0 if outcome.ok else 1


def _report(args: argparse.Namespace) -> int:
    source: Path = args.file
    try:
        content = source.read_bytes()
    except OSError as exc:
        print(f"❌ Cannot read {source}: {exc}", file=sys.stderr)
        return 1

    try:
        page = rehydrate_report(content, search=args.search, source_label=source.name)
    except RehydrationError as exc:
        print(f"❌ {source} is not a backup file: {exc}", file=sys.stderr)
        return 1

    target: Path = args.out or source.with_name(f"{source.stem}-report.html")
    try:
        target.write_text(page, encoding="utf-8")
    except OSError as exc:
        print(f"❌ Cannot write {target}: {exc}", file=sys.stderr)
        return 1
    print(f"✅ Report written to {target}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    if args.command == "export":
        return asyncio.run(_export(args))
    return _report(args)


if __name__ == "__main__":
    sys.exit(main())
