from __future__ import annotations

import argparse
import json
import os
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from workhistory.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from workhistory.db import queries
from workhistory.db.connection import db_cursor
from workhistory.excel.reader import WorkbookReadError
from workhistory.excel.writer import export_records
from workhistory.logging.init import log_summary, setup_logging
from workhistory.services.metrics import build_full_summary, build_year_summary
from workhistory.services.orchestrator import ProcessingError, prepare_sheet, run_import
from workhistory.services.summary import render_summary_line

"""CLI entrypoint.

    python -m workhistory.cli import data/work_orders.xlsx [--sheet NAME] [--dry-run]
    python -m workhistory.cli inspect data/work_orders.xlsx
    python -m workhistory.cli report [--year 2024] [--json]
    python -m workhistory.cli export out.xlsx [--year 2024]

DISABLE_DB_CONNECT=1 forces the import into dry-run mode (tests, CI).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its database settings win over the shell environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="workhistory", description="Work-history spreadsheet import and reports")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a spreadsheet into the work_history table")
    imp.add_argument("file", type=Path)
    imp.add_argument("--sheet", help="Sheet to import (default: the sheet with the most rows)")
    imp.add_argument("--dry-run", action="store_true", help="Transform only, do not write to the database")

    ins = sub.add_parser("inspect", help="Show sheets and the resolved column mapping")
    ins.add_argument("file", type=Path)
    ins.add_argument("--sheet")

    rep = sub.add_parser("report", help="Print the dashboard summary")
    rep.add_argument("--year", type=int, help="Drill down into one year")
    rep.add_argument("--recent", type=int, metavar="N", help="List the N most recent records")
    rep.add_argument("--json", action="store_true", help="Print JSON instead of text")

    exp = sub.add_parser("export", help="Export stored records to .xlsx")
    exp.add_argument("file", type=Path)
    exp.add_argument("--year", type=int)
    return p.parse_args(argv)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


def _cmd_import(cfg: AppConfig, args: argparse.Namespace, logger) -> int:
    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    try:
        if dry_run:
            summary, _ = run_import(cfg, args.file, args.sheet, cursor=None)
        else:
            with db_cursor(cfg.database) as cur:
                summary, _ = run_import(cfg, args.file, args.sheet, cursor=cur)
    except ProcessingError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    logger.info(f"mode={summary.mode} records={summary.records} inserted={summary.inserted_rows}")
    logger.info(
        f"run started={summary.start_time.isoformat(timespec='seconds')} "
        f"finished={summary.end_time.isoformat(timespec='seconds')}"
    )
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(summary)[len("SUMMARY "):])
    return EXIT_SUCCESS


def _cmd_inspect(cfg: AppConfig, args: argparse.Namespace, logger) -> int:
    try:
        selection, counts = prepare_sheet(args.file, args.sheet, cfg.settings.sample_size)
    except WorkbookReadError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {args.file.name}")
    for name, count in counts.items():
        marker = "*" if name == selection.name else " "
        print(f" {marker} SHEET: {name} rows={count}")
    print("  mapping:")
    for field_name, column in selection.mapping.as_dict().items():
        print(f"    {field_name:<14} <- {column if column is not None else '(not found)'}")
    sample = selection.rows[:3]
    print("  sample_rows=", json.dumps(sample, default=_json_default, ensure_ascii=False))
    return EXIT_SUCCESS


def _print_full_summary(data: dict[str, Any]) -> None:
    s = data["summary"]
    print(f"planned_hours={s['total_planned_hours']:.2f} actual_hours={s['total_actual_hours']:.2f} "
          f"overrun_hours={s['total_overrun_hours']:.2f}")
    print(f"planned_cost={s['total_planned_cost']:.2f} actual_cost={s['total_actual_cost']:.2f} "
          f"avg_margin={s['avg_profit_margin']:.1f}%")
    print(f"jobs={s['total_jobs']} customers={s['total_customers']}")
    print(f"most_profitable_customer={s['most_profitable_customer'] or '-'} "
          f"highest_overrun_customer={s['highest_overrun_customer'] or '-'}")
    print(f"most_used_work_center={s['most_used_work_center'] or '-'} "
          f"highest_overrun_work_center={s['highest_overrun_work_center'] or '-'}")
    for y in data["yearly_breakdown"]:
        print(f"  {y.get('year')}: planned={float(y.get('planned_hours') or 0):.2f} "
              f"actual={float(y.get('actual_hours') or 0):.2f} jobs={y.get('job_count')}")


def _print_year_summary(year: int, data: dict[str, Any]) -> None:
    s = data["summary"]
    print(f"YEAR {year}: operations={s['total_operations']} jobs={s['total_jobs']} "
          f"parts={s['total_unique_parts']} customers={s['total_customers']}")
    print(f"planned_hours={s['total_planned_hours']:.2f} actual_hours={s['total_actual_hours']:.2f} "
          f"overrun_hours={s['total_overrun_hours']:.2f} ghost_hours={s['ghost_hours']:.2f} "
          f"ncr_hours={s['total_ncr_hours']:.2f}")
    print(f"opportunity_cost={s['opportunity_cost_dollars']:.2f} "
          f"buffer={s['recommended_buffer_percent']:.1f}% accuracy={s['planning_accuracy']:.1f}%")
    for q in data["quarterly_summary"]:
        print(f"  Q{q['quarter']}: planned={q['planned_hours']:.2f} actual={q['actual_hours']:.2f} "
              f"overrun={q['overrun_hours']:.2f}")


def _cmd_report(cfg: AppConfig, args: argparse.Namespace, logger) -> int:
    try:
        with db_cursor(cfg.database, dict_rows=True) as cur:
            if args.recent is not None:
                data = {"recent_records": queries.fetch_recent_records(cur, args.recent, cfg.table)}
            elif args.year is not None:
                data = build_year_summary(queries.fetch_year_records(cur, args.year, cfg.table), args.year)
            else:
                data = build_full_summary(
                    queries.fetch_yearly_summary(cur, cfg.table),
                    queries.fetch_work_center_summary(cur, cfg.table),
                    queries.fetch_customer_summary(cur, cfg.table),
                    labor_rate=cfg.settings.labor_rate,
                )
                data["quarterly_trends"] = queries.fetch_quarterly_trends(cur, cfg.table)
    except Exception as e:
        logger.error(f"report: {e}")
        return EXIT_FATAL

    if args.json:
        print(json.dumps(data, default=_json_default, ensure_ascii=False, indent=2))
    elif args.recent is not None:
        for r in data["recent_records"]:
            print(f"{r['date']} {r['job_id']} {r['part_id']} {r['work_center']} {r['company_name']} "
                  f"planned={float(r['planned_hours']):.2f} actual={float(r['actual_hours']):.2f}")
    elif args.year is not None:
        _print_year_summary(args.year, data)
    else:
        _print_full_summary(data)
    return EXIT_SUCCESS


def _cmd_export(cfg: AppConfig, args: argparse.Namespace, logger) -> int:
    try:
        with db_cursor(cfg.database, dict_rows=True) as cur:
            if args.year is not None:
                rows = queries.fetch_year_records(cur, args.year, cfg.table)
            else:
                rows = queries.fetch_all_records(cur, cfg.table)
        count = export_records(rows, args.file)
    except ValueError as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
    log_summary(f"exported={count} file={args.file}")
    return EXIT_SUCCESS


_COMMANDS = {
    "import": _cmd_import,
    "inspect": _cmd_inspect,
    "report": _cmd_report,
    "export": _cmd_export,
}


def main(argv: list[str] | None = None) -> int:
    # None means "read sys.argv"; an explicit [] must not pick up pytest's own arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    return _COMMANDS[args.command](cfg, args, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
