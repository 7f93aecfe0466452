from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

"""WorkHistoryRecord model.

One record is one work-order operation: planned vs. actual labor hours
booked against a job, part, work center and customer on a calendar date.
Records are append-only facts; nothing in this tool mutates them after
creation.
"""

__all__ = [
    "RECORD_COLUMNS",
    "WorkHistoryRecord",
]

# Payload field order expected by the persistence layer
RECORD_COLUMNS: tuple[str, ...] = (
    "date",
    "job_id",
    "part_id",
    "work_center",
    "company_name",
    "planned_hours",
    "actual_hours",
    "labor_rate",
)


@dataclass(frozen=True)
class WorkHistoryRecord:
    """Canonical work-history row produced by the row transformer.

    Attributes:
        date: Calendar date as ``YYYY-MM-DD``
        job_id: Sales order / job number
        part_id: Material or operation text
        work_center: Production resource the operation ran on
        company_name: Customer
        planned_hours: Non-negative planned labor hours
        actual_hours: Non-negative confirmed labor hours
        labor_rate: Positive hourly rate used for cost figures
    """
    date: str
    job_id: str
    part_id: str
    work_center: str
    company_name: str
    planned_hours: float
    actual_hours: float
    labor_rate: float

    @staticmethod
    def placeholder(
        labor_rate: float = 199.0,
        work_center: str = "Default",
        today: str | None = None,
    ) -> WorkHistoryRecord:
        """Record used when a sheet produced no rows at all."""
        return WorkHistoryRecord(
            date=today or datetime.now(UTC).date().isoformat(),
            job_id="DEFAULT",
            part_id="DEFAULT",
            work_center=work_center,
            company_name="Default Company",
            planned_hours=0.0,
            actual_hours=0.0,
            labor_rate=labor_rate,
        )

    @property
    def year(self) -> str:
        return self.date[:4]

    @property
    def overrun_hours(self) -> float:
        return self.actual_hours - self.planned_hours

    def to_row(self) -> tuple[Any, ...]:
        """Values in RECORD_COLUMNS order (INSERT payload)."""
        return tuple(getattr(self, c) for c in RECORD_COLUMNS)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
