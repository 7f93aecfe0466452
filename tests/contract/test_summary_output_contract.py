from __future__ import annotations

import re
from datetime import UTC, datetime

from workhistory.models.import_result import RunSummary
from workhistory.services.summary import render_summary_line

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+file=(\S+)\s+sheet=(\S+)\s+rows=([0-9]+)\s+records=([0-9]+)\s+"
    r"batches=([0-9]+)\s+issues=([0-9]+)\s+years=((?:[0-9]{4}(?:,[0-9]{4})*)|-)\s+"
    r"mode=(live|dry-run)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY file=wh.xlsx sheet=Operations rows=2500 records=2500 batches=3 issues=0 "
        "years=2023,2024 mode=live elapsed_sec=2.145"
    )
    m = SUMMARY_PATTERN.match(line)
    assert m, "SUMMARY line should match contract regex"
    assert m.group(7) == "2023,2024"


def test_rendered_lines_match_contract():
    t = datetime(2024, 1, 1, tzinfo=UTC)
    for years, mode, elapsed in ((["2024"], "live", 0.5), ([], "dry-run", 0.0), (["2022", "2023"], "live", 12.0)):
        line = render_summary_line(RunSummary("wh.xlsx", "Ops", 10, 10, 1, 2, years, mode, t, t, elapsed))
        assert SUMMARY_PATTERN.match(line), line


def test_records_never_below_rows():
    # records == rows, except an empty sheet stores one placeholder record
    line = "SUMMARY file=a.xlsx sheet=S rows=0 records=1 batches=0 issues=0 years=2025 mode=dry-run elapsed_sec=0"
    m = SUMMARY_PATTERN.match(line)
    assert m
    assert int(m.group(4)) >= int(m.group(3))
