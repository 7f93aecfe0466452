from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.work_record import RECORD_COLUMNS, WorkHistoryRecord
from .batch_insert import BatchInsertError, InsertResult, batch_insert, quote_identifier

"""work_history table definition and the bulk save of an import payload."""

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id SERIAL PRIMARY KEY,
    date DATE NOT NULL,
    job_id TEXT NOT NULL,
    part_id TEXT NOT NULL,
    work_center TEXT NOT NULL,
    company_name TEXT NOT NULL,
    planned_hours NUMERIC NOT NULL DEFAULT 0,
    actual_hours NUMERIC NOT NULL DEFAULT 0,
    labor_rate NUMERIC NOT NULL DEFAULT 199
)
"""


def ensure_table(cursor: Any, table: str = "work_history") -> None:
    cursor.execute(CREATE_TABLE_SQL.format(table=quote_identifier(table)))


def save_records(
    cursor: Any,
    records: Sequence[WorkHistoryRecord],
    table: str = "work_history",
    page_size: int = 1000,
) -> InsertResult:
    """Insert the whole payload in one transaction.

    Either every record is stored or none is: any failure rolls back and
    is re-raised as BatchInsertError.
    """
    try:
        cursor.execute("BEGIN")
        ensure_table(cursor, table)
        result = batch_insert(
            cursor,
            table=table,
            columns=RECORD_COLUMNS,
            rows=(r.to_row() for r in records),
            page_size=page_size,
            metrics_callback=lambda m: logger.debug(
                "inserted %d rows into %s in %.3fs", m.batch_size, m.table, m.elapsed_seconds
            ),
        )
        cursor.execute("COMMIT")
    except Exception as e:
        try:
            cursor.execute("ROLLBACK")
        except Exception as rollback_e:
            logger.error("rollback failed: %s", rollback_e)
        if isinstance(e, BatchInsertError):
            raise
        raise BatchInsertError(str(e)) from e
    return result
