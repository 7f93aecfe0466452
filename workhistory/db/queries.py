from __future__ import annotations

import logging
from typing import Any

from .batch_insert import quote_identifier

"""Aggregate queries over the work_history table.

Each fetch_* function takes a cursor returning dict rows (RealDictCursor)
and returns a list of plain dicts. Cost figures are hours x labor_rate.
"""

logger = logging.getLogger(__name__)

YEARLY_SUMMARY_SQL = """
WITH yearly_data AS (
    SELECT
        EXTRACT(YEAR FROM date)::int::text AS year,
        SUM(planned_hours) AS planned_hours,
        SUM(actual_hours) AS actual_hours,
        COUNT(DISTINCT part_id) AS unique_parts,
        SUM(planned_hours * labor_rate) AS planned_cost,
        SUM(actual_hours * labor_rate) AS actual_cost,
        COUNT(DISTINCT job_id) AS job_count,
        array_agg(DISTINCT company_name ORDER BY company_name) AS companies
    FROM {table}
    WHERE date IS NOT NULL
    GROUP BY EXTRACT(YEAR FROM date)
)
SELECT
    year,
    ROUND(planned_hours::numeric, 2) AS planned_hours,
    ROUND(actual_hours::numeric, 2) AS actual_hours,
    unique_parts,
    ROUND(planned_cost::numeric, 2) AS planned_cost,
    ROUND(actual_cost::numeric, 2) AS actual_cost,
    job_count,
    companies
FROM yearly_data
ORDER BY year ASC
"""

QUARTERLY_TRENDS_SQL = """
WITH quarterly_data AS (
    SELECT
        EXTRACT(YEAR FROM date) AS year,
        EXTRACT(QUARTER FROM date) AS quarter,
        company_name,
        SUM(planned_hours * labor_rate) AS planned_cost,
        SUM(actual_hours * labor_rate) AS actual_cost,
        COUNT(DISTINCT job_id) AS job_count
    FROM {table}
    WHERE date IS NOT NULL
    GROUP BY EXTRACT(YEAR FROM date), EXTRACT(QUARTER FROM date), company_name
)
SELECT
    CONCAT('Q', quarter::integer, ' ', year::integer) AS label,
    company_name,
    ROUND(planned_cost::numeric, 2) AS planned_cost,
    ROUND(actual_cost::numeric, 2) AS actual_cost,
    ROUND(((actual_cost - planned_cost) / NULLIF(planned_cost, 0) * 100)::numeric, 1) AS overrun_percentage,
    job_count
FROM quarterly_data
ORDER BY year ASC, quarter ASC, company_name ASC
"""

WORK_CENTER_SUMMARY_SQL = """
SELECT
    work_center,
    company_name,
    SUM(planned_hours) AS total_planned_hours,
    SUM(actual_hours) AS total_actual_hours,
    SUM(actual_hours - planned_hours) AS overrun_hours,
    SUM((actual_hours - planned_hours) * labor_rate) AS overrun_cost
FROM {table}
WHERE work_center IS NOT NULL AND work_center != ''
GROUP BY work_center, company_name
ORDER BY company_name ASC, work_center ASC
"""

CUSTOMER_SUMMARY_SQL = """
SELECT
    company_name,
    COUNT(DISTINCT job_id) AS job_count,
    SUM(planned_hours) AS total_planned_hours,
    SUM(actual_hours) AS total_actual_hours,
    SUM(actual_hours - planned_hours) AS overrun_hours,
    SUM(planned_hours * labor_rate) AS planned_cost,
    SUM(actual_hours * labor_rate) AS actual_cost
FROM {table}
WHERE company_name IS NOT NULL AND company_name != ''
GROUP BY company_name
ORDER BY SUM(actual_hours) DESC
"""

YEAR_RECORDS_SQL = """
SELECT
    date::text AS date,
    job_id,
    part_id,
    work_center,
    company_name,
    planned_hours,
    actual_hours,
    labor_rate
FROM {table}
WHERE EXTRACT(YEAR FROM date) = %s
ORDER BY date ASC, company_name ASC
"""

RECENT_RECORDS_SQL = """
SELECT
    date::text AS date,
    job_id,
    part_id,
    work_center,
    company_name,
    planned_hours,
    actual_hours,
    labor_rate
FROM {table}
ORDER BY date DESC
LIMIT %s
"""

ALL_RECORDS_SQL = """
SELECT
    date::text AS date,
    job_id,
    part_id,
    work_center,
    company_name,
    planned_hours,
    actual_hours,
    labor_rate
FROM {table}
ORDER BY date ASC, id ASC
"""


def _fetch(cursor: Any, sql: str, table: str, params: tuple[Any, ...] | None = None) -> list[dict[str, Any]]:
    cursor.execute(sql.format(table=quote_identifier(table)), params)
    return [dict(r) for r in cursor.fetchall()]


def fetch_yearly_summary(cursor: Any, table: str = "work_history") -> list[dict[str, Any]]:
    rows = _fetch(cursor, YEARLY_SUMMARY_SQL, table)
    if rows:
        logger.debug("years found in database: %s", ", ".join(str(r["year"]) for r in rows))
    else:
        logger.debug("no yearly data found in the database")
    return rows


def fetch_quarterly_trends(cursor: Any, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, QUARTERLY_TRENDS_SQL, table)


def fetch_work_center_summary(cursor: Any, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, WORK_CENTER_SUMMARY_SQL, table)


def fetch_customer_summary(cursor: Any, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, CUSTOMER_SUMMARY_SQL, table)


def fetch_year_records(cursor: Any, year: int, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, YEAR_RECORDS_SQL, table, (year,))


def fetch_recent_records(cursor: Any, limit: int = 100, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, RECENT_RECORDS_SQL, table, (limit,))


def fetch_all_records(cursor: Any, table: str = "work_history") -> list[dict[str, Any]]:
    return _fetch(cursor, ALL_RECORDS_SQL, table)
