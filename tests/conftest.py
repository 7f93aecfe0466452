# Shared pytest fixtures
from __future__ import annotations
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

from workhistory.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # Handlers bind sys.stdout at setup time; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _no_db_env(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE",
                "DISABLE_DB_CONNECT"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """table: work_history
import:
  batch_size: 1000
  sample_size: 20
  labor_rate: 199
  default_work_center: Default
  default_company: Unknown
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sap_rows() -> list[dict[str, Any]]:
    """Three rows the way an SAP work-order export names its columns."""
    return [
        {
            "Sales Document": 4500123,
            "Opr. short text": "Bracket",
            "Oper.WorkCenter": "CNC-01",
            "List name": "Acme Corp",
            "Work": 10.0,
            "Actual work": 12.5,
            "Basic fin. date": datetime(2024, 3, 5),
        },
        {
            "Sales Document": 4500124,
            "Opr. short text": "Housing",
            "Oper.WorkCenter": "MILL",
            "List name": "Globex",
            "Work": "7,5",
            "Actual work": 0,
            "Basic fin. date": 45500,
        },
        {
            "Sales Document": 4500125,
            "Opr. short text": "NCR rework shaft",
            "Oper.WorkCenter": "LATHE",
            "List name": "Acme Corp",
            "Work": 4,
            "Actual work": 6,
            "Basic fin. date": "12/31/2023",
        },
    ]


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    """Factory writing an .xlsx into data/ from {sheet name: list of row dicts}."""

    def _make(sheets: dict[str, list[dict[str, Any]]], name: str = "work_history.xlsx") -> Path:
        path = temp_workdir / "data" / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
        return path

    return _make
