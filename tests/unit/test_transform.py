from __future__ import annotations

from datetime import datetime

import pytest

from workhistory.excel.columns import resolve_columns
from workhistory.excel.transform import cell_text, coerce_number, guess_company_name, transform_row
from workhistory.models.column_mapping import CanonicalField, ColumnMapping
from workhistory.models.config_models import ImportSettings
from workhistory.models.import_issue import COMPANY_NOT_FOUND, UNPARSEABLE_DATE, UNPARSEABLE_NUMBER

TODAY = "2025-01-15"

FULL_MAPPING = ColumnMapping(columns={
    CanonicalField.COMPANY: "Customer",
    CanonicalField.JOB: "Job",
    CanonicalField.WORK_CENTER: "Work Center",
    CanonicalField.PART: "Part",
    CanonicalField.PLANNED_HOURS: "Planned Hours",
    CanonicalField.ACTUAL_HOURS: "Actual Hours",
    CanonicalField.DATE: "Date",
})


def _row(**overrides):
    row = {
        "Customer": "Acme Corp",
        "Job": "J-100",
        "Work Center": "CNC-01",
        "Part": "Bracket",
        "Planned Hours": 10,
        "Actual Hours": 12.5,
        "Date": "2024-03-05",
    }
    row.update(overrides)
    return row


def test_transform_full_row():
    rec = transform_row(_row(), FULL_MAPPING, 0, today=TODAY)
    assert rec.date == "2024-03-05"
    assert rec.job_id == "J-100"
    assert rec.part_id == "Bracket"
    assert rec.work_center == "CNC-01"
    assert rec.company_name == "Acme Corp"
    assert rec.planned_hours == 10.0
    assert rec.actual_hours == 12.5
    assert rec.labor_rate == 199.0


def test_comma_decimal_and_garbage_hours():
    issues = []
    rec = transform_row(
        _row(**{"Planned Hours": "12,5", "Actual Hours": "abc"}),
        FULL_MAPPING,
        0,
        today=TODAY,
        on_issue=lambda *a: issues.append(a),
    )
    assert rec.planned_hours == 12.5
    assert rec.actual_hours == 0.0
    assert issues == [(0, UNPARSEABLE_NUMBER, "actual_hours='abc'")]


def test_negative_hours_clamped_to_zero():
    issues = []
    rec = transform_row(_row(**{"Actual Hours": -3}), FULL_MAPPING, 4, on_issue=lambda *a: issues.append(a))
    assert rec.actual_hours == 0.0
    assert issues[0][0] == 4
    assert issues[0][1] == UNPARSEABLE_NUMBER


def test_defaults_when_nothing_resolves():
    settings = ImportSettings(labor_rate=150.0, default_work_center="WC-X", default_company="Nobody")
    issues = []
    rec = transform_row({}, ColumnMapping(), 6, settings, today=TODAY, on_issue=lambda *a: issues.append(a))
    assert rec.job_id == "JOB-7"
    assert rec.part_id == "PART-7"
    assert rec.work_center == "WC-X"
    assert rec.company_name == "Nobody"
    assert rec.planned_hours == 0.0
    assert rec.actual_hours == 0.0
    assert rec.labor_rate == 150.0
    assert rec.date == TODAY
    assert [i[1] for i in issues] == [COMPANY_NOT_FOUND]


def test_empty_cells_use_defaults():
    rec = transform_row(
        _row(Job=None, Part="   ", **{"Work Center": float("nan"), "Planned Hours": None}),
        FULL_MAPPING,
        1,
        today=TODAY,
    )
    assert rec.job_id == "JOB-2"
    assert rec.part_id == "PART-2"
    assert rec.work_center == "Default"
    assert rec.planned_hours == 0.0


def test_unparseable_date_falls_back_to_today():
    issues = []
    rec = transform_row(_row(Date="someday"), FULL_MAPPING, 0, today=TODAY, on_issue=lambda *a: issues.append(a))
    assert rec.date == TODAY
    assert issues == [(0, UNPARSEABLE_DATE, "Date='someday'")]


def test_company_fallback_from_other_columns():
    mapping = ColumnMapping(columns={CanonicalField.JOB: "Job"})
    row = {"Job": "J-1", "Order Date": "Acme Date Corp", "Qty": "Widget Co", "Note": "(All)",
           "Amount": "1,234.00", "Shipped": "3/4/24", "Buyer": "Initech"}
    rec = transform_row(row, mapping, 0, today=TODAY)
    assert rec.company_name == "Initech"


def test_guess_company_name_skips_rejected_values():
    row = {"Order Date": "Acme Corp", "Total Hours": "Globex", "Code": "AB", "Amount": "$1,200.50",
           "Filter": "(All)", "Placeholder": "Unknown", "Shipped": "3/4/24", "Buyer": "Initech"}
    assert guess_company_name(row) == "Initech"


def test_guess_company_name_none():
    assert guess_company_name({"Qty": "Globex", "Amount": 12}) is None


def test_labor_rate_column_overrides_default():
    mapping = ColumnMapping(columns={**FULL_MAPPING.columns, CanonicalField.LABOR_RATE: "Rate"})
    assert transform_row(_row(Rate="85,5"), mapping, 0, today=TODAY).labor_rate == 85.5
    assert transform_row(_row(Rate=0), mapping, 0, today=TODAY).labor_rate == 199.0
    assert transform_row(_row(Rate="n/a"), mapping, 0, today=TODAY).labor_rate == 199.0


def test_numeric_job_ids_lose_float_suffix():
    assert cell_text(4500123.0) == "4500123"
    assert cell_text(12.5) == "12.5"
    assert cell_text(datetime(2024, 1, 2)) == "2024-01-02"
    assert cell_text("  ") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        ("", 0.0),
        (3, 3.0),
        ("12,5", 12.5),
        ("8.25 h", 8.25),
        ("abc", None),
        (True, None),
        (float("inf"), None),
    ],
)
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


def test_sap_rows_transform(sap_rows):
    mapping = resolve_columns(sap_rows)
    records = [transform_row(r, mapping, i, today=TODAY) for i, r in enumerate(sap_rows)]
    assert [r.date for r in records] == ["2024-03-05", "2024-07-27", "2023-12-31"]
    assert [r.job_id for r in records] == ["4500123", "4500124", "4500125"]
    assert records[1].planned_hours == 7.5
    assert records[1].company_name == "Globex"
