from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from ..excel.transform import IssueCallback, transform_row
from ..models.column_mapping import ColumnMapping
from ..models.config_models import ImportSettings
from ..models.import_result import BatchProgress, BatchStatsAccumulator, ImportResult
from ..models.work_record import WorkHistoryRecord

"""Batch importer.

Drives the row transformer over a whole sheet in fixed-size batches.
Between batches control goes back to the caller (the generator yields a
BatchProgress), which is where a progress bar repaints. Records keep the
input order; synthesized ids depend on the row position.

There is no retry or rollback here: the transformer never fails, so the
only failure mode of an import is an unreadable file, which is raised by
the workbook reader before the first batch.
"""

__all__ = [
    "BatchImporter",
    "import_sheet",
    "progress_percent",
]

logger = logging.getLogger(__name__)


def progress_percent(processed: int, total: int) -> int:
    """Rounded percentage (half up) of processed rows."""
    if total <= 0:
        return 100
    return (processed * 100 * 2 + total) // (2 * total)


class BatchImporter:
    """Transforms rows batch by batch.

    Usage::

        importer = BatchImporter(rows, mapping, settings)
        for progress in importer.run():
            bar.update(progress.percent)
        records = importer.records
    """

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]],
        mapping: ColumnMapping,
        settings: ImportSettings | None = None,
        *,
        batch_size: int | None = None,
        on_issue: IssueCallback | None = None,
    ) -> None:
        self.rows = rows
        self.mapping = mapping
        self.settings = settings or ImportSettings()
        self.batch_size = batch_size if batch_size is not None else self.settings.batch_size
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        self.on_issue = on_issue
        self.records: list[WorkHistoryRecord] = []
        self.progress: list[int] = []
        self.placeholder = False
        self._batch_stats = BatchStatsAccumulator()
        self._done = False

    @property
    def total_batches(self) -> int:
        return -(-len(self.rows) // self.batch_size)

    def run(self) -> Iterator[BatchProgress]:
        """Process all batches, yielding after each one."""
        if self._done:
            raise RuntimeError("importer already ran")
        total = len(self.rows)
        total_batches = self.total_batches

        for batch_index in range(total_batches):
            start = batch_index * self.batch_size
            end = min(start + self.batch_size, total)
            batch_start = time.perf_counter()
            today = datetime.now(UTC).date().isoformat()
            for offset, row in enumerate(self.rows[start:end]):
                self.records.append(
                    transform_row(
                        row,
                        self.mapping,
                        start + offset,
                        self.settings,
                        today=today,
                        on_issue=self.on_issue,
                    )
                )
            self._batch_stats.add_batch_time(time.perf_counter() - batch_start)

            percent = progress_percent(end, total)
            self.progress.append(percent)
            logger.debug("batch %d/%d rows=%d..%d progress=%d%%", batch_index + 1, total_batches, start, end, percent)
            yield BatchProgress(
                batch_index=batch_index,
                total_batches=total_batches,
                processed_rows=end,
                total_rows=total,
                percent=percent,
            )

        if not self.records:
            logger.warning("sheet produced no rows; storing a single placeholder record")
            self.records.append(WorkHistoryRecord.placeholder(
                labor_rate=self.settings.labor_rate,
                work_center=self.settings.default_work_center,
            ))
            self.placeholder = True
            self.progress.append(100)
            yield BatchProgress(batch_index=0, total_batches=1, processed_rows=0, total_rows=0, percent=100)

        self._done = True

    def result(self) -> ImportResult:
        if not self._done:
            for _ in self.run():
                pass
        total_batches, avg, p95 = self._batch_stats.get_stats()
        return ImportResult(
            records=list(self.records),
            progress=list(self.progress),
            source_rows=len(self.rows),
            placeholder=self.placeholder,
            total_batches=total_batches,
            avg_batch_seconds=avg,
            p95_batch_seconds=p95,
        )


def import_sheet(
    rows: Sequence[Mapping[str, Any]],
    mapping: ColumnMapping,
    batch_size: int | None = None,
    settings: ImportSettings | None = None,
    on_issue: IssueCallback | None = None,
) -> ImportResult:
    """Run a whole sheet through the importer and return the result."""
    return BatchImporter(rows, mapping, settings, batch_size=batch_size, on_issue=on_issue).result()
