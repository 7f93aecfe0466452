from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.import_issue import ImportIssue

"""Import issue log buffering.

- JSON Lines, fixed key set (see ImportIssue)
- one ``logs/import-issues-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on
  the first non-empty flush
- serial use only, no locking
"""

__all__ = [
    "ImportIssue",
    "IssueLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer for import issues. Flush appends JSON Lines."""

    def __init__(self, file: str = "", sheet: str = "", logs_dir: Path | None = None) -> None:
        self.file = file
        self.sheet = sheet
        self.logs_dir = logs_dir or LOGS_DIR
        self._records: list[ImportIssue] = []
        self._file_path: Path | None = None
        self.counts: Counter[str] = Counter()

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"import-issues-{stamp}.log"
        return self._file_path

    def append(self, record: ImportIssue) -> None:
        self._records.append(record)
        self.counts[record.issue_type] += 1

    def report(self, row_index: int, issue_type: str, detail: str) -> None:
        """Issue callback for the row transformer (0-based row index)."""
        self.append(ImportIssue.create(self.file, self.sheet, row_index + 1, issue_type, detail))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    @property
    def total(self) -> int:
        """Issues reported over the buffer's lifetime, flushed or not."""
        return sum(self.counts.values())

    def flush(self) -> Path | None:
        """Write buffered issues; returns the log path or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
