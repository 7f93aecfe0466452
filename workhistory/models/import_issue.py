from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ImportIssue model for the import issue log.

Import problems never stop an import: unresolved columns, unparseable
dates and numbers are defaulted. Each occurrence is still recorded as one
ImportIssue so operators can notice systematic mis-imports. Issues are
written as JSON Lines with a fixed key set.

row=-1 marks sheet-level issues (e.g. a field that no header resolved to).
"""

__all__ = [
    "ImportIssue",
    "UNRESOLVED_COLUMN",
    "UNPARSEABLE_DATE",
    "UNPARSEABLE_NUMBER",
    "COMPANY_NOT_FOUND",
]

UNRESOLVED_COLUMN = "UNRESOLVED_COLUMN"
UNPARSEABLE_DATE = "UNPARSEABLE_DATE"
UNPARSEABLE_NUMBER = "UNPARSEABLE_NUMBER"
COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"


@dataclass(frozen=True)
class ImportIssue:
    """Structured issue record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source workbook name
        sheet: Sheet name within the workbook
        row: Data row number (1-based). -1 for sheet-level issues
        issue_type: Issue classification in UPPER_SNAKE_CASE format
        detail: Human readable description (offending value, field name)
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    issue_type: str  # UPPER_SNAKE
    detail: str

    @staticmethod
    def create(file: str, sheet: str, row: int, issue_type: str, detail: str) -> ImportIssue:
        """Create a new ImportIssue stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ImportIssue(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            issue_type=issue_type,
            detail=detail,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
