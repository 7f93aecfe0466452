from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook reader.

Decodes a source file into header-keyed rows. The first row of each sheet
is the header, cells keep their native type (dtype=object) so the date
normalizer still sees datetimes and Excel serial numbers. CSV has no cell
types, so plain decimal literals in a CSV are read back as numbers.

A file that cannot be decoded is the one fatal error of an import; it is
raised as WorkbookReadError before any row is transformed.
"""

__all__ = [
    "WorkbookReadError",
    "read_workbook",
    "select_default_sheet",
    "sheet_rows",
    "SUPPORTED_SUFFIXES",
]

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".xlsx", ".xlsm", ".xls", ".csv"}

# Plain decimal literal; leading-zero integers such as "007" stay text
_CSV_NUMBER_RE = re.compile(r"^[+-]?(?:0|[1-9]\d*)(?:\.\d+)?$")


class WorkbookReadError(Exception):
    """Raised when the source file is missing, corrupt or unsupported."""


def read_workbook(path: Path) -> dict[str, pd.DataFrame]:
    """Read every sheet of ``path`` into a DataFrame keyed by sheet name.

    CSV files are returned as a single sheet named after the file stem.
    """
    if not path.exists():
        raise WorkbookReadError(f"file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise WorkbookReadError(f"unsupported file type '{suffix}': {path.name}")

    try:
        if suffix == ".csv":
            return {path.stem: pd.read_csv(path, dtype=object).map(_csv_number)}
        dfs: dict[str, pd.DataFrame] = {}
        with pd.ExcelFile(path) as xls:
            for name in xls.sheet_names:
                dfs[str(name)] = xls.parse(name, header=0, dtype=object)
    except Exception as e:
        raise WorkbookReadError(f"failed to read {path.name}: {e}") from e

    if not dfs:
        raise WorkbookReadError(f"workbook has no sheets: {path.name}")
    return dfs


def _csv_number(value: Any) -> Any:
    """CSV cells all arrive as text; give numeric ones back their type."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not _CSV_NUMBER_RE.match(text):
        return value
    if "." in text:
        return float(text)
    return int(text)


def select_default_sheet(sheets: dict[str, pd.DataFrame]) -> str:
    """Name of the sheet with the most rows (earliest sheet on ties)."""
    if not sheets:
        raise WorkbookReadError("workbook has no sheets")
    best_name = next(iter(sheets))
    best_rows = -1
    for name, df in sheets.items():
        logger.debug("sheet=%s rows=%d", name, len(df))
        if len(df) > best_rows:
            best_name, best_rows = name, len(df)
    return best_name


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def sheet_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a sheet DataFrame into header-keyed rows.

    Headers are stripped, NaN/NaT cells become None and rows without any
    value are dropped.
    """
    columns = [str(c).strip() for c in df.columns]
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        row = {col: _clean_cell(val) for col, val in zip(columns, raw, strict=False)}
        if all(v is None for v in row.values()):
            continue
        rows.append(row)
    return rows
