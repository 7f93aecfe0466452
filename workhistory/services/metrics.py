from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

from ..models.config_models import DEFAULT_LABOR_RATE
from ..models.work_record import RECORD_COLUMNS, WorkHistoryRecord

"""Derived production-performance metrics.

The aggregate queries return per-year / per-customer / per-work-center
rows; this module combines them into the dashboard figures (totals,
margins, best and worst customers and work centers) and computes the
single-year drill-down (overruns, ghost hours, NCR tracking) from raw
records.

Margin is (actual cost - planned cost) / planned cost * 100: negative
means the work came in under plan, i.e. profitable.
"""

__all__ = [
    "build_full_summary",
    "build_year_summary",
    "is_ncr_text",
    "records_frame",
]

# Non-conformance markers in free text (job, part, work center)
_NCR_RE = re.compile(r"\bNCR\b|non[-\s]?conform|\brework|\bscrap", re.IGNORECASE)
_NCR_TEXT_COLUMNS = ("job_id", "part_id", "work_center")
TOP_OVERRUN_LIMIT = 20
TOP_CUSTOMER_LIMIT = 10


def is_ncr_text(text: Any) -> bool:
    return isinstance(text, str) and bool(_NCR_RE.search(text))


def _num(value: Any) -> float:
    """Decimal / None / numpy -> float."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(number) else number


def _margin(planned_cost: float, actual_cost: float) -> float:
    if planned_cost > 0:
        return (actual_cost - planned_cost) / planned_cost * 100
    return 0.0


def records_frame(records: Iterable[WorkHistoryRecord | Mapping[str, Any]]) -> pd.DataFrame:
    """DataFrame with RECORD_COLUMNS from records or record-shaped dicts."""
    rows = [r.to_dict() if isinstance(r, WorkHistoryRecord) else dict(r) for r in records]
    df = pd.DataFrame(rows, columns=list(RECORD_COLUMNS))
    for col in ("planned_hours", "actual_hours", "labor_rate"):
        df[col] = df[col].map(_num).astype(float)
    df["date"] = df["date"].astype(str)
    return df


def build_full_summary(
    yearly: Sequence[Mapping[str, Any]],
    work_centers: Sequence[Mapping[str, Any]],
    customers: Sequence[Mapping[str, Any]],
    labor_rate: float = DEFAULT_LABOR_RATE,
) -> dict[str, Any]:
    """Combine the aggregate query results into the dashboard summary."""
    total_planned = sum(_num(y.get("planned_hours")) for y in yearly)
    total_actual = sum(_num(y.get("actual_hours")) for y in yearly)
    total_jobs = sum(int(_num(y.get("job_count"))) for y in yearly)

    planned_cost = sum(_num(y.get("planned_cost")) for y in yearly) or total_planned * labor_rate
    actual_cost = sum(_num(y.get("actual_cost")) for y in yearly) or total_actual * labor_rate

    companies: set[str] = set()
    for y in yearly:
        companies.update(c for c in (y.get("companies") or []) if c)

    summary: dict[str, Any] = {
        "total_planned_hours": total_planned,
        "total_actual_hours": total_actual,
        "total_overrun_hours": total_actual - total_planned,
        "total_planned_cost": planned_cost,
        "total_actual_cost": actual_cost,
        "total_jobs": total_jobs,
        "total_operations": total_jobs,
        "total_customers": len(companies),
        "avg_profit_margin": _margin(planned_cost, actual_cost),
        "most_profitable_customer": "",
        "highest_overrun_customer": "",
        "most_used_work_center": "",
        "highest_overrun_work_center": "",
    }

    customer_metrics: list[dict[str, Any]] = []
    best_margin = 0.0
    worst_margin = 0.0
    for c in customers:
        planned = _num(c.get("total_planned_hours"))
        actual = _num(c.get("total_actual_hours"))
        c_planned_cost = _num(c.get("planned_cost")) or planned * labor_rate
        c_actual_cost = _num(c.get("actual_cost")) or actual * labor_rate
        margin = _margin(c_planned_cost, c_actual_cost)
        name = c.get("company_name") or ""
        customer_metrics.append({
            "customer": name,
            "jobs": int(_num(c.get("job_count"))),
            "planned_hours": planned,
            "actual_hours": actual,
            "overrun_hours": actual - planned,
            "planned_cost": c_planned_cost,
            "actual_cost": c_actual_cost,
            "profit_margin": margin,
        })
        if margin < best_margin:
            best_margin = margin
            summary["most_profitable_customer"] = name
        if margin > worst_margin:
            worst_margin = margin
            summary["highest_overrun_customer"] = name
    customer_metrics.sort(key=lambda m: m["actual_cost"], reverse=True)

    workcenter_breakdown = [
        {
            "work_center": wc.get("work_center"),
            "total_planned_hours": _num(wc.get("total_planned_hours")),
            "total_actual_hours": _num(wc.get("total_actual_hours")),
            "overrun_hours": _num(wc.get("overrun_hours")),
        }
        for wc in work_centers
    ]

    work_center_metrics: list[dict[str, Any]] = []
    if workcenter_breakdown:
        wc_df = (
            pd.DataFrame(workcenter_breakdown)
            .groupby("work_center", sort=False)
            .sum(numeric_only=True)
            .reset_index()
        )
        for row in wc_df.itertuples(index=False):
            planned = float(row.total_planned_hours)
            actual = float(row.total_actual_hours)
            work_center_metrics.append({
                "work_center": row.work_center,
                "total_hours": actual,
                "overrun_hours": float(row.overrun_hours),
                "utilization": actual / planned * 100 if planned > 0 else 0.0,
            })
        work_center_metrics.sort(key=lambda m: m["total_hours"], reverse=True)

        max_hours = 0.0
        max_overrun = 0.0
        for m in work_center_metrics:
            if m["total_hours"] > max_hours:
                max_hours = m["total_hours"]
                summary["most_used_work_center"] = m["work_center"]
            if m["overrun_hours"] > max_overrun:
                max_overrun = m["overrun_hours"]
                summary["highest_overrun_work_center"] = m["work_center"]

    return {
        "summary": summary,
        "yearly_breakdown": [dict(y) for y in yearly],
        "workcenter_breakdown": workcenter_breakdown,
        "customer_metrics": customer_metrics[:TOP_CUSTOMER_LIMIT],
        "work_center_metrics": work_center_metrics,
    }


def _empty_year_summary() -> dict[str, Any]:
    return {
        "summary": {
            "total_planned_hours": 0.0,
            "total_actual_hours": 0.0,
            "total_overrun_hours": 0.0,
            "ghost_hours": 0.0,
            "total_ncr_hours": 0.0,
            "total_planned_cost": 0.0,
            "total_actual_cost": 0.0,
            "opportunity_cost_dollars": 0.0,
            "recommended_buffer_percent": 0.0,
            "planning_accuracy": 0.0,
            "total_jobs": 0,
            "total_operations": 0,
            "total_unique_parts": 0,
            "total_customers": 0,
        },
        "quarterly_summary": [],
        "top_overruns": [],
        "workcenter_summary": [],
        "ncr_summary": [],
        "repeat_ncr_failures": [],
    }


def build_year_summary(
    records: Iterable[WorkHistoryRecord | Mapping[str, Any]],
    year: int | str,
) -> dict[str, Any]:
    """Drill-down figures for one calendar year."""
    df = records_frame(records)
    df = df[df["date"].str.startswith(str(year))]
    if df.empty:
        return _empty_year_summary()

    df = df.assign(
        overrun=(df["actual_hours"] - df["planned_hours"]).clip(lower=0),
        quarter=pd.to_datetime(df["date"], errors="coerce").dt.quarter,
        ncr=df[list(_NCR_TEXT_COLUMNS)].apply(lambda r: any(is_ncr_text(v) for v in r), axis=1),
    )
    df["overrun_cost"] = df["overrun"] * df["labor_rate"]

    planned = float(df["planned_hours"].sum())
    actual = float(df["actual_hours"].sum())
    overrun = float(df["overrun"].sum())
    summary = {
        "total_planned_hours": planned,
        "total_actual_hours": actual,
        "total_overrun_hours": overrun,
        "ghost_hours": float(df.loc[df["actual_hours"] == 0, "planned_hours"].sum()),
        "total_ncr_hours": float(df.loc[df["ncr"], "actual_hours"].sum()),
        "total_planned_cost": float((df["planned_hours"] * df["labor_rate"]).sum()),
        "total_actual_cost": float((df["actual_hours"] * df["labor_rate"]).sum()),
        "opportunity_cost_dollars": float(df["overrun_cost"].sum()),
        "recommended_buffer_percent": overrun / planned * 100 if planned > 0 else 0.0,
        "planning_accuracy": planned / actual * 100 if actual > 0 else 0.0,
        "total_jobs": int(df["job_id"].nunique()),
        "total_operations": int(len(df)),
        "total_unique_parts": int(df["part_id"].nunique()),
        "total_customers": int(df["company_name"].nunique()),
    }

    quarterly = (
        df.dropna(subset=["quarter"])
        .groupby("quarter")
        .agg(
            planned_hours=("planned_hours", "sum"),
            actual_hours=("actual_hours", "sum"),
            overrun_hours=("overrun", "sum"),
            overrun_cost=("overrun_cost", "sum"),
            total_jobs=("job_id", "nunique"),
        )
        .reset_index()
    )
    quarterly["quarter"] = quarterly["quarter"].astype(int)

    over = df[df["actual_hours"] > df["planned_hours"]].sort_values("overrun", ascending=False)
    top_overruns = [
        {
            "job_number": r.job_id,
            "part_name": r.part_id,
            "work_center": r.work_center,
            "planned_hours": float(r.planned_hours),
            "actual_hours": float(r.actual_hours),
            "overrun_hours": float(r.overrun),
            "overrun_cost": float(r.overrun_cost),
        }
        for r in over.head(TOP_OVERRUN_LIMIT).itertuples(index=False)
    ]

    workcenters = (
        df.groupby("work_center")
        .agg(
            job_count=("job_id", "nunique"),
            planned_hours=("planned_hours", "sum"),
            actual_hours=("actual_hours", "sum"),
            overrun_hours=("overrun", "sum"),
            overrun_cost=("overrun_cost", "sum"),
        )
        .reset_index()
        .sort_values("overrun_cost", ascending=False)
    )

    ncr_df = df[df["ncr"]].assign(ncr_cost=lambda d: d["actual_hours"] * d["labor_rate"])
    ncr_summary = (
        ncr_df.groupby("part_id")
        .agg(
            total_ncr_hours=("actual_hours", "sum"),
            total_ncr_cost=("ncr_cost", "sum"),
            ncr_occurrences=("job_id", "size"),
        )
        .reset_index()
        .rename(columns={"part_id": "part_name"})
        .sort_values("total_ncr_cost", ascending=False)
    )
    repeat = (
        ncr_df.groupby("part_id")
        .agg(total_jobs=("job_id", "nunique"), total_ncrs=("job_id", "size"))
        .reset_index()
        .rename(columns={"part_id": "part_name"})
    )
    repeat = repeat[repeat["total_jobs"] > 1].sort_values("total_ncrs", ascending=False)

    return {
        "summary": summary,
        "quarterly_summary": quarterly.to_dict("records"),
        "top_overruns": top_overruns,
        "workcenter_summary": workcenters.to_dict("records"),
        "ncr_summary": ncr_summary.to_dict("records"),
        "repeat_ncr_failures": repeat.to_dict("records"),
    }
