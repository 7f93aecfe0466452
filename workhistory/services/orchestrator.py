from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..config.loader import AppConfig
from ..db.batch_insert import BatchInsertError
from ..db.schema import save_records
from ..excel.columns import resolve_columns
from ..excel.reader import WorkbookReadError, read_workbook, select_default_sheet, sheet_rows
from ..logging.issue_log import IssueLogBuffer
from ..models.column_mapping import CanonicalField, ColumnMapping
from ..models.import_issue import UNRESOLVED_COLUMN, ImportIssue
from ..models.import_result import ImportResult, RunSummary
from .importer import BatchImporter
from .progress import ImportProgress

"""Service orchestration for one workbook import.

read workbook -> pick sheet -> resolve columns from a sample -> transform
in batches -> save the payload in one transaction -> SUMMARY data.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal import failure (unreadable workbook, persistence failure)."""


@dataclass(frozen=True)
class SheetSelection:
    name: str
    rows: list[dict[str, Any]]
    mapping: ColumnMapping


def prepare_sheet(
    path: Path,
    sheet: str | None = None,
    sample_size: int = 20,
) -> tuple[SheetSelection, dict[str, int]]:
    """Read ``path``, select a sheet and resolve its column mapping.

    Returns the selection and the row count of every sheet.

    Raises:
        WorkbookReadError: unreadable file or unknown sheet name
    """
    sheets = read_workbook(path)
    counts = {name: len(df) for name, df in sheets.items()}
    if sheet is None:
        sheet = select_default_sheet(sheets)
        logger.info("selected sheet '%s' (%d rows) of %d sheet(s)", sheet, counts[sheet], len(sheets))
    elif sheet not in sheets:
        raise WorkbookReadError(f"sheet '{sheet}' not found in {path.name}; available: {list(sheets)}")

    rows = sheet_rows(sheets[sheet])
    mapping = resolve_columns(rows[:sample_size])
    return SheetSelection(name=sheet, rows=rows, mapping=mapping), counts


def _report_unresolved(mapping: ColumnMapping, issues: IssueLogBuffer) -> None:
    for canonical in mapping.unresolved:
        # No rate column is the normal case; the configured rate applies
        if canonical is CanonicalField.LABOR_RATE:
            continue
        logger.warning("no '%s' column found; default applies to every row", canonical.value)
        issues.append(
            ImportIssue.create(
                issues.file, issues.sheet, -1, UNRESOLVED_COLUMN, f"no column for field '{canonical.value}'"
            )
        )


def run_import(
    config: AppConfig,
    path: Path,
    sheet: str | None = None,
    cursor: Any = None,
) -> tuple[RunSummary, ImportResult]:
    """Import one workbook.

    Args:
        config: loaded application config
        path: workbook to import
        sheet: sheet override (default: the sheet with the most rows)
        cursor: database cursor; None runs a dry run without persistence

    Raises:
        ProcessingError: unreadable workbook or failed save
    """
    start_time = datetime.now(UTC)
    settings = config.settings

    try:
        selection, _ = prepare_sheet(path, sheet, settings.sample_size)
    except WorkbookReadError as e:
        raise ProcessingError(str(e)) from e

    issues = IssueLogBuffer(file=path.name, sheet=selection.name)
    logger.info("column mapping: %s", selection.mapping.as_dict())
    _report_unresolved(selection.mapping, issues)

    importer = BatchImporter(selection.rows, selection.mapping, settings, on_issue=issues.report)
    with ImportProgress(selection.name) as progress:
        for step in importer.run():
            progress.update(step.percent)
            progress.set_postfix(rows=step.processed_rows)
    result = importer.result()

    inserted = 0
    mode = "dry-run"
    if cursor is not None:
        mode = "live"
        try:
            inserted = save_records(
                cursor, result.records, table=config.table, page_size=settings.batch_size
            ).inserted_rows
        except BatchInsertError as e:
            issues.flush()
            raise ProcessingError(f"saving {len(result.records)} records failed: {e}") from e

    log_path = issues.flush()
    if log_path is not None:
        logger.warning("%d import issue(s) written to %s", issues.total, log_path)
        for issue_type, count in sorted(issues.counts.items()):
            logger.info("issues %s=%d", issue_type, count)

    end_time = datetime.now(UTC)
    summary = RunSummary(
        file_name=path.name,
        sheet_name=selection.name,
        source_rows=result.source_rows,
        records=len(result.records),
        batches=result.total_batches,
        issues=issues.total,
        years=result.years,
        mode=mode,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        inserted_rows=inserted,
    )
    return summary, result
