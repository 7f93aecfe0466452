from __future__ import annotations

from decimal import Decimal

import pytest

from workhistory.models.work_record import WorkHistoryRecord
from workhistory.services.metrics import build_full_summary, build_year_summary, is_ncr_text, records_frame

YEARLY = [
    {"year": "2023", "planned_hours": Decimal("100"), "actual_hours": Decimal("120"),
     "planned_cost": Decimal("19900"), "actual_cost": Decimal("23880"), "job_count": 5,
     "companies": ["Acme", "Globex"]},
    {"year": "2024", "planned_hours": Decimal("50"), "actual_hours": Decimal("40"),
     "planned_cost": Decimal("9950"), "actual_cost": Decimal("7960"), "job_count": 3,
     "companies": ["Acme", "Initech"]},
]
CUSTOMERS = [
    {"company_name": "Acme", "job_count": 4, "total_planned_hours": 100, "total_actual_hours": 90,
     "planned_cost": 19900, "actual_cost": 17910},
    {"company_name": "Globex", "job_count": 2, "total_planned_hours": 30, "total_actual_hours": 45,
     "planned_cost": 5970, "actual_cost": 8955},
    {"company_name": "Initech", "job_count": 2, "total_planned_hours": 20, "total_actual_hours": 25},
]
WORK_CENTERS = [
    {"work_center": "CNC", "company_name": "Acme", "total_planned_hours": 50, "total_actual_hours": 60,
     "overrun_hours": 10},
    {"work_center": "MILL", "company_name": "Acme", "total_planned_hours": 40, "total_actual_hours": 35,
     "overrun_hours": -5},
    {"work_center": "CNC", "company_name": "Globex", "total_planned_hours": 10, "total_actual_hours": 20,
     "overrun_hours": 10},
]


def _rec(date, job, part, wc, company, planned, actual, rate=199.0):
    return WorkHistoryRecord(date, job, part, wc, company, planned, actual, rate)


YEAR_RECORDS = [
    _rec("2024-01-15", "J-1", "Bracket", "CNC", "Acme", 10, 15),
    _rec("2024-02-10", "J-2", "NCR Housing", "MILL", "Globex", 8, 0),
    _rec("2024-05-01", "J-3", "NCR Housing", "MILL", "Globex", 4, 6, 100.0),
    _rec("2024-07-20", "J-3", "Shaft", "CNC", "Acme", 5, 5),
    _rec("2023-12-31", "J-0", "Old", "CNC", "Acme", 1, 100),
]


@pytest.mark.parametrize(
    "text, expected",
    [("NCR Housing", True), ("rework bracket", True), ("Nonconforming", True), ("non-conformance", True),
     ("scrapped part", True), ("Bracket", False), ("FENCRX", False), (None, False), (12, False)],
)
def test_is_ncr_text(text, expected):
    assert is_ncr_text(text) is expected


def test_full_summary_totals():
    summary = build_full_summary(YEARLY, WORK_CENTERS, CUSTOMERS)["summary"]
    assert summary["total_planned_hours"] == 150
    assert summary["total_actual_hours"] == 160
    assert summary["total_overrun_hours"] == 10
    assert summary["total_planned_cost"] == 29850
    assert summary["total_actual_cost"] == 31840
    assert summary["total_jobs"] == 8
    assert summary["total_customers"] == 3
    assert summary["avg_profit_margin"] == pytest.approx(6.6667, abs=1e-3)


def test_full_summary_customers():
    data = build_full_summary(YEARLY, WORK_CENTERS, CUSTOMERS)
    assert data["summary"]["most_profitable_customer"] == "Acme"
    assert data["summary"]["highest_overrun_customer"] == "Globex"
    metrics = data["customer_metrics"]
    assert [m["customer"] for m in metrics] == ["Acme", "Globex", "Initech"]
    assert metrics[0]["profit_margin"] == pytest.approx(-10.0)
    # no cost columns: hours x labor rate
    assert metrics[2]["actual_cost"] == pytest.approx(25 * 199)


def test_full_summary_work_centers():
    data = build_full_summary(YEARLY, WORK_CENTERS, CUSTOMERS)
    wc = data["work_center_metrics"]
    assert [m["work_center"] for m in wc] == ["CNC", "MILL"]
    assert wc[0]["total_hours"] == 80
    assert wc[0]["overrun_hours"] == 20
    assert wc[0]["utilization"] == pytest.approx(133.333, abs=1e-3)
    assert data["summary"]["most_used_work_center"] == "CNC"
    assert data["summary"]["highest_overrun_work_center"] == "CNC"
    assert len(data["workcenter_breakdown"]) == 3


def test_full_summary_empty():
    data = build_full_summary([], [], [])
    assert data["summary"]["total_jobs"] == 0
    assert data["summary"]["avg_profit_margin"] == 0.0
    assert data["summary"]["most_profitable_customer"] == ""
    assert data["customer_metrics"] == []
    assert data["work_center_metrics"] == []


def test_year_summary_figures():
    summary = build_year_summary(YEAR_RECORDS, 2024)["summary"]
    assert summary["total_operations"] == 4
    assert summary["total_jobs"] == 3
    assert summary["total_unique_parts"] == 3
    assert summary["total_customers"] == 2
    assert summary["total_planned_hours"] == 27
    assert summary["total_actual_hours"] == 26
    assert summary["total_overrun_hours"] == 7
    assert summary["ghost_hours"] == 8
    assert summary["total_ncr_hours"] == 6
    assert summary["total_planned_cost"] == pytest.approx(4977)
    assert summary["total_actual_cost"] == pytest.approx(4580)
    assert summary["opportunity_cost_dollars"] == pytest.approx(1195)
    assert summary["recommended_buffer_percent"] == pytest.approx(7 / 27 * 100)
    assert summary["planning_accuracy"] == pytest.approx(27 / 26 * 100)


def test_year_summary_breakdowns():
    data = build_year_summary(YEAR_RECORDS, "2024")
    assert [q["quarter"] for q in data["quarterly_summary"]] == [1, 2, 3]
    assert data["quarterly_summary"][0]["overrun_cost"] == pytest.approx(995)
    assert [o["job_number"] for o in data["top_overruns"]] == ["J-1", "J-3"]
    assert [w["work_center"] for w in data["workcenter_summary"]] == ["CNC", "MILL"]
    ncr = data["ncr_summary"]
    assert len(ncr) == 1
    assert ncr[0]["part_name"] == "NCR Housing"
    assert ncr[0]["total_ncr_cost"] == pytest.approx(600)
    assert ncr[0]["ncr_occurrences"] == 2
    assert data["repeat_ncr_failures"][0]["part_name"] == "NCR Housing"
    assert data["repeat_ncr_failures"][0]["total_jobs"] == 2


def test_year_summary_accepts_db_rows():
    rows = [dict(r.to_dict(), planned_hours=Decimal(str(r.planned_hours))) for r in YEAR_RECORDS]
    assert build_year_summary(rows, 2024)["summary"]["total_planned_hours"] == 27


def test_year_summary_empty_year():
    data = build_year_summary(YEAR_RECORDS, 2021)
    assert data["summary"]["total_operations"] == 0
    assert data["top_overruns"] == []


def test_records_frame_columns():
    df = records_frame(YEAR_RECORDS[:1])
    assert list(df.columns) == ["date", "job_id", "part_id", "work_center", "company_name",
                                "planned_hours", "actual_hours", "labor_rate"]
    assert df["planned_hours"].dtype == float
