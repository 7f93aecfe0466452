from __future__ import annotations

from unittest.mock import Mock

import pytest

from workhistory.db import queries
from workhistory.db.batch_insert import BatchInsertError


def _cursor(rows):
    cursor = Mock()
    cursor.fetchall.return_value = rows
    return cursor


def test_fetch_yearly_summary_formats_table():
    cursor = _cursor([{"year": "2024", "planned_hours": 10}])
    rows = queries.fetch_yearly_summary(cursor, "wh")
    assert rows == [{"year": "2024", "planned_hours": 10}]
    sql, params = cursor.execute.call_args[0]
    assert 'FROM "wh"' in sql
    assert params is None


def test_fetch_year_records_passes_year_param():
    cursor = _cursor([])
    assert queries.fetch_year_records(cursor, 2024) == []
    sql, params = cursor.execute.call_args[0]
    assert "EXTRACT(YEAR FROM date) = %s" in sql
    assert params == (2024,)


def test_fetch_recent_records_limit():
    cursor = _cursor([{"job_id": "J-1"}])
    queries.fetch_recent_records(cursor, limit=5)
    assert cursor.execute.call_args[0][1] == (5,)


@pytest.mark.parametrize(
    "fn",
    [
        queries.fetch_quarterly_trends,
        queries.fetch_work_center_summary,
        queries.fetch_customer_summary,
        queries.fetch_all_records,
    ],
)
def test_fetchers_return_plain_dicts(fn):
    cursor = _cursor([{"a": 1}])
    result = fn(cursor)
    assert result == [{"a": 1}]
    assert type(result[0]) is dict
    assert '"work_history"' in cursor.execute.call_args[0][0]


def test_bad_table_name_rejected():
    with pytest.raises(BatchInsertError):
        queries.fetch_all_records(_cursor([]), "work_history; drop")
