from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Column resolution models.

A ColumnMapping ties each canonical field to the spreadsheet header that
carries it in one particular source file. Lookups return a tagged outcome
(Found / NotFound) instead of raising: an unresolved field is an expected
result, and the row transformer applies its per-field default.
"""

__all__ = [
    "CanonicalField",
    "ColumnMapping",
    "ColumnMatch",
    "Found",
    "NotFound",
    "NOT_FOUND",
]


class CanonicalField(Enum):
    """Target fields a source header can be resolved to."""
    COMPANY = "company"
    JOB = "job"
    WORK_CENTER = "work_center"
    PART = "part"
    PLANNED_HOURS = "planned_hours"
    ACTUAL_HOURS = "actual_hours"
    DATE = "date"
    LABOR_RATE = "labor_rate"


@dataclass(frozen=True)
class Found:
    column: str


@dataclass(frozen=True)
class NotFound:
    pass


ColumnMatch = Found | NotFound

NOT_FOUND = NotFound()


@dataclass(frozen=True)
class ColumnMapping:
    """Resolved canonical field -> source header mapping.

    Only resolved fields are stored; everything else is NotFound.
    """
    columns: dict[CanonicalField, str] = field(default_factory=dict)

    def match(self, canonical: CanonicalField) -> ColumnMatch:
        column = self.columns.get(canonical)
        return NOT_FOUND if column is None else Found(column)

    def get(self, canonical: CanonicalField) -> str | None:
        return self.columns.get(canonical)

    @property
    def unresolved(self) -> list[CanonicalField]:
        return [f for f in CanonicalField if f not in self.columns]

    def as_dict(self) -> dict[str, str | None]:
        """Printable form (field value -> header or None)."""
        return {f.value: self.columns.get(f) for f in CanonicalField}
