from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.work_record import RECORD_COLUMNS, WorkHistoryRecord

"""Excel export of work-history records or report rows."""

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_SHEET = "Work History"


def export_records(
    records: Iterable[WorkHistoryRecord | Mapping[str, Any]],
    path: Path,
    sheet_name: str = DEFAULT_EXPORT_SHEET,
) -> int:
    """Write records to an .xlsx file and return the number of rows written."""
    rows = [r.to_dict() if isinstance(r, WorkHistoryRecord) else dict(r) for r in records]
    if not rows:
        raise ValueError("no data available to export")

    df = pd.DataFrame(rows)
    # Keep payload column order first when exporting records
    ordered = [c for c in RECORD_COLUMNS if c in df.columns]
    df = df[ordered + [c for c in df.columns if c not in ordered]]

    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.info("exported %d records to %s", len(rows), path)
    return len(rows)
