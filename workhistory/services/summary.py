from __future__ import annotations

from ..models.import_result import RunSummary

"""SUMMARY line rendering for an import run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for tiny numbers
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(summary: RunSummary) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY file={name} sheet={sheet} rows={source rows} records={records}
    batches={n} issues={n} years={y1,y2} mode={live|dry-run} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> s = RunSummary("wh.xlsx", "Sheet1", 2500, 2500, 3, 0, ["2023", "2024"],
        ...                "dry-run", t, t, 2.0)
        >>> render_summary_line(s)
        'SUMMARY file=wh.xlsx sheet=Sheet1 rows=2500 records=2500 batches=3 issues=0 years=2023,2024 mode=dry-run elapsed_sec=2'
    """
    years = ",".join(summary.years) if summary.years else "-"
    return (
        f"SUMMARY file={summary.file_name} "
        f"sheet={summary.sheet_name} "
        f"rows={summary.source_rows} "
        f"records={summary.records} "
        f"batches={summary.batches} "
        f"issues={summary.issues} "
        f"years={years} "
        f"mode={summary.mode} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)}"
    )
