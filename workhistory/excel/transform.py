from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from typing import Any

import numpy as np

from ..models.column_mapping import CanonicalField, ColumnMapping
from ..models.config_models import ImportSettings
from ..models.import_issue import COMPANY_NOT_FOUND, UNPARSEABLE_DATE, UNPARSEABLE_NUMBER
from ..models.work_record import WorkHistoryRecord
from .dates import is_empty_cell, normalize_date

"""Row transformer.

Builds one WorkHistoryRecord from one raw spreadsheet row. The transform
always succeeds: missing columns, empty cells and unparseable values are
replaced by per-field defaults and reported through the optional issue
callback (row_index, issue_type, detail).
"""

__all__ = [
    "IssueCallback",
    "cell_text",
    "coerce_number",
    "guess_company_name",
    "transform_row",
]

logger = logging.getLogger(__name__)

IssueCallback = Callable[[int, str, str], None]

# Headers that never carry a customer name
_COMPANY_SKIP_TOKENS = ("date", "time", "hour", "qty", "number")
_COMPANY_REJECT_VALUES = {"Unknown", "(All)"}
_NUMERIC_LIKE_RE = re.compile(r"^[0-9.,$]+$")
_SHORT_DATE_RE = re.compile(r"^[0-9]{1,2}/[0-9]{1,2}/[0-9]{2,4}$")
# Leading decimal number, the way a lenient float parser reads "12.5 h"
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def cell_text(value: Any) -> str | None:
    """Trimmed text of a cell, None when empty.

    Integral floats (pandas reads integer columns with gaps as float) lose
    their ".0" so job numbers stay job numbers.
    """
    if is_empty_cell(value):
        return None
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        text = str(int(value))
    elif isinstance(value, datetime):
        text = value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    elif isinstance(value, date):
        text = value.isoformat()
    else:
        text = str(value)
    text = text.strip()
    return text or None


def coerce_number(value: Any) -> float | None:
    """Read a numeric cell.

    Numbers pass through; strings get their first decimal comma turned into
    a point and are read up to the first non-numeric character. Empty cells
    read as 0. Returns None when nothing numeric could be read.
    """
    if is_empty_cell(value):
        return 0.0
    if _is_number(value):
        number = float(value)
        return None if math.isinf(number) else number
    if isinstance(value, str):
        m = _LEADING_FLOAT_RE.match(value.strip().replace(",", ".", 1))
        if not m:
            return None
        number = float(m.group(0))
        return None if math.isinf(number) else number
    return None


def guess_company_name(row: Mapping[str, Any]) -> str | None:
    """Pick the first cell that looks like a customer name.

    Skips headers about dates, times, hours, quantities and numbers, and
    values that are short, numeric or currency-like, placeholders or short
    M/D/YY dates.
    """
    for key, value in row.items():
        lowered = str(key).lower()
        if any(token in lowered for token in _COMPANY_SKIP_TOKENS):
            continue
        if not isinstance(value, str):
            continue
        text = value.strip()
        if (
            len(text) > 3
            and not _NUMERIC_LIKE_RE.match(text)
            and text not in _COMPANY_REJECT_VALUES
            and not _SHORT_DATE_RE.match(text)
        ):
            return text
    return None


def _text_field(row: Mapping[str, Any], column: str | None) -> str | None:
    if column is None:
        return None
    return cell_text(row.get(column))


def _hours_field(
    row: Mapping[str, Any],
    column: str | None,
    row_index: int,
    name: str,
    on_issue: IssueCallback | None,
) -> float:
    if column is None:
        return 0.0
    raw = row.get(column)
    number = coerce_number(raw)
    if number is None or math.isnan(number):
        if on_issue is not None and number is None:
            on_issue(row_index, UNPARSEABLE_NUMBER, f"{name}={raw!r}")
        return 0.0
    if number < 0:
        if on_issue is not None:
            on_issue(row_index, UNPARSEABLE_NUMBER, f"{name}={raw!r} negative, using 0")
        return 0.0
    return number


def transform_row(
    row: Mapping[str, Any],
    mapping: ColumnMapping,
    row_index: int,
    settings: ImportSettings | None = None,
    *,
    today: str | None = None,
    on_issue: IssueCallback | None = None,
) -> WorkHistoryRecord:
    """Transform one raw row (0-based ``row_index``) into a record."""
    cfg = settings or ImportSettings()

    date_column = mapping.get(CanonicalField.DATE)
    date_str = None
    if date_column is not None:
        raw_date = row.get(date_column)
        date_str = normalize_date(raw_date)
        if date_str is None and on_issue is not None:
            on_issue(row_index, UNPARSEABLE_DATE, f"{date_column}={raw_date!r}")
    if date_str is None:
        date_str = today or datetime.now(UTC).date().isoformat()

    company = _text_field(row, mapping.get(CanonicalField.COMPANY))
    if company is None:
        company = guess_company_name(row)
        if company is None:
            company = cfg.default_company
            if on_issue is not None:
                on_issue(row_index, COMPANY_NOT_FOUND, "no company column value or fallback candidate")

    labor_rate = cfg.labor_rate
    rate_column = mapping.get(CanonicalField.LABOR_RATE)
    if rate_column is not None:
        rate = coerce_number(row.get(rate_column))
        if rate is not None and not math.isnan(rate) and rate > 0:
            labor_rate = rate

    return WorkHistoryRecord(
        date=date_str,
        job_id=_text_field(row, mapping.get(CanonicalField.JOB)) or f"JOB-{row_index + 1}",
        part_id=_text_field(row, mapping.get(CanonicalField.PART)) or f"PART-{row_index + 1}",
        work_center=_text_field(row, mapping.get(CanonicalField.WORK_CENTER)) or cfg.default_work_center,
        company_name=company,
        planned_hours=_hours_field(
            row, mapping.get(CanonicalField.PLANNED_HOURS), row_index, "planned_hours", on_issue
        ),
        actual_hours=_hours_field(
            row, mapping.get(CanonicalField.ACTUAL_HOURS), row_index, "actual_hours", on_issue
        ),
        labor_rate=labor_rate,
    )
