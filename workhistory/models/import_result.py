from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime

from .work_record import WorkHistoryRecord

"""Result models for a sheet import.

BatchProgress is what the batch importer yields between batches;
ImportResult is the aggregate handed to the persistence step and to the
SUMMARY line.
"""


@dataclass(frozen=True)
class BatchProgress:
    """Progress after one batch.

    percent is monotonically non-decreasing and equals 100 on the last batch.
    """
    batch_index: int  # 0-based
    total_batches: int
    processed_rows: int
    total_rows: int
    percent: int


@dataclass(frozen=True)
class ImportResult:
    """Records and progress trail of a completed sheet import."""
    records: list[WorkHistoryRecord]
    progress: list[int] = field(default_factory=list)
    source_rows: int = 0  # rows handed to the importer (placeholder excluded)
    placeholder: bool = False  # True when the sheet was empty
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0

    @property
    def years(self) -> list[str]:
        return sorted({r.year for r in self.records if r.date})


@dataclass(frozen=True)
class RunSummary:
    """Everything the SUMMARY line reports for one CLI import run."""
    file_name: str
    sheet_name: str
    source_rows: int
    records: int
    batches: int
    issues: int
    years: list[str]
    mode: str  # live | dry-run
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    inserted_rows: int = 0


class BatchStatsAccumulator:
    """Accumulates per-batch timings and reports count / mean / p95."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile (19th out of 20 quantiles, 0-indexed)

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
