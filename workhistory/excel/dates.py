from __future__ import annotations

import logging
import math
import re
import warnings
from datetime import UTC, date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd

"""Date normalizer.

Turns whatever a spreadsheet cell holds for a date into ``YYYY-MM-DD``:

1. empty                      -> None
2. date / datetime / Timestamp -> its calendar date (UTC for aware values)
3. number                     -> Excel serial day (1900 date system)
4. string                     -> generic parse, then MM-DD-YYYY,
                                 MM/DD/YYYY, DD.MM.YYYY
5. anything else              -> None

Ambiguous dashed and slashed strings are read month first (US). The
function never raises; callers choose the fallback for None.
"""

__all__ = [
    "normalize_date",
    "excel_serial_to_date",
    "is_empty_cell",
]

logger = logging.getLogger(__name__)

# Excel day 1 is 1900-01-01
_EXCEL_DAY_ZERO = date(1899, 12, 31)
# Excel counts a fictitious 1900-02-29 as day 60
_EXCEL_LEAP_BUG_SERIAL = 60
_MIN_YEAR = 1900
_MAX_YEAR = 2100

_YEAR_RE = re.compile(r"\d{4}")
# (regex, group order) -> groups are (month, day, year) or (day, month, year)
_STRING_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), "mdy"),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), "mdy"),
    (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$"), "dmy"),
)


def is_empty_cell(value: Any) -> bool:
    """None, NaN, NaT and blank strings count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def excel_serial_to_date(serial: float) -> date | None:
    """Convert an Excel serial day number to a date.

    Serials above 60 are shifted back one day to undo the 1900 leap-year
    bug. Results outside 1900..2100 are rejected.
    """
    if math.isnan(serial) or math.isinf(serial):
        return None
    adjusted = serial - 1 if serial > _EXCEL_LEAP_BUG_SERIAL else serial
    try:
        result = _EXCEL_DAY_ZERO + timedelta(days=math.trunc(adjusted))
    except OverflowError:
        return None
    if _MIN_YEAR <= result.year <= _MAX_YEAR:
        return result
    return None


def _from_datetime(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.date().isoformat()


def _parse_generic(text: str) -> str | None:
    # Bare numbers like "12" would be read as a day of the current month
    if not _YEAR_RE.search(text):
        return None
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return _from_datetime(parsed.to_pydatetime())


def _parse_patterns(text: str) -> str | None:
    for pattern, order in _STRING_PATTERNS:
        m = pattern.match(text)
        if not m:
            continue
        first, second, year = (int(g) for g in m.groups())
        month, day = (first, second) if order == "mdy" else (second, first)
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            continue
    return None


def normalize_date(value: Any) -> str | None:
    """Normalize a date cell to ``YYYY-MM-DD`` or None."""
    if is_empty_cell(value):
        return None

    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)

    if isinstance(value, datetime):
        return _from_datetime(value)
    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, (int, float, np.integer, np.floating)):
        result = excel_serial_to_date(float(value))
        if result is None:
            logger.debug("excel serial out of range: %r", value)
            return None
        return result.isoformat()

    if isinstance(value, str):
        text = value.strip()
        return _parse_generic(text) or _parse_patterns(text)

    return None
