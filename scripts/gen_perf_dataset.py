#!/usr/bin/env python3
"""Synthetic work-history workbook generator for performance testing.

Writes an .xlsx file shaped like an ERP work-order export: one header row
followed by data rows, with the messiness the importer has to cope with
(Excel serial dates next to text dates, comma decimals, blank cells).

    python scripts/gen_perf_dataset.py data/perf.xlsx --rows 50000
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADERS = [
    "Sales Order",
    "Material",
    "Resource",
    "Customer",
    "Planned Hours",
    "Actual Hours",
    "Confirmation Date",
]

WORK_CENTERS = ["CNC-01", "CNC-02", "LATHE", "MILL", "WELD", "PAINT", "ASSEMBLY", "QA"]
CUSTOMERS = ["Acme Corp", "Globex", "Initech", "Umbrella Ltd", "Stark Industries", "Wayne Enterprises"]
PARTS = ["Bracket", "Housing", "Shaft", "Flange", "Gear", "Cover Plate", "Rework Bracket", "NCR Housing"]


def _date_cell(rng: np.random.Generator, day: pd.Timestamp) -> Any:
    """Same calendar day in one of the encodings seen in real exports."""
    kind = rng.integers(0, 4)
    if kind == 0:
        return day.to_pydatetime()
    if kind == 1:
        # Excel serial (1900 date system)
        return int((day - pd.Timestamp("1899-12-30")).days)
    if kind == 2:
        return day.strftime("%m/%d/%Y")
    return day.strftime("%Y-%m-%d")


def _hours_cell(rng: np.random.Generator, hours: float) -> Any:
    if rng.random() < 0.1:
        return f"{hours:.2f}".replace(".", ",")
    return round(hours, 2)


def generate_work_history(rows: int, seed: int = 42, blank_ratio: float = 0.02) -> pd.DataFrame:
    """Generate ``rows`` synthetic work-order operations.

    Args:
        rows: Number of data rows
        seed: Random seed for reproducible data
        blank_ratio: Share of cells left empty

    Returns:
        DataFrame with the HEADERS columns
    """
    rng = np.random.default_rng(seed)
    days = pd.date_range("2022-01-01", "2024-12-31", freq="D")

    data: dict[str, list[Any]] = {h: [] for h in HEADERS}
    for i in range(rows):
        planned = float(rng.uniform(0.5, 40))
        actual = max(0.0, planned * float(rng.normal(1.1, 0.25)))
        data["Sales Order"].append(f"SO-{100000 + i // 5}")
        data["Material"].append(str(rng.choice(PARTS)))
        data["Resource"].append(str(rng.choice(WORK_CENTERS)))
        data["Customer"].append(str(rng.choice(CUSTOMERS)))
        data["Planned Hours"].append(_hours_cell(rng, planned))
        data["Actual Hours"].append(_hours_cell(rng, actual))
        data["Confirmation Date"].append(_date_cell(rng, days[rng.integers(0, len(days))]))

    df = pd.DataFrame(data, dtype=object)
    if blank_ratio > 0:
        mask = rng.random(df.shape) < blank_ratio
        df = df.mask(mask)
    return df


def create_excel_file(output_path: Path, rows: int, sheet: str = "Work History", seed: int = 42) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = generate_work_history(rows, seed)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet, index=False)

    print(f"Created Excel file: {output_path}")
    print(f"  Sheet: {sheet}")
    print(f"  Rows: {rows:,} (+ 1 header row)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic work-history workbook for performance testing",
    )
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=50_000, help="Number of data rows (default: 50,000)")
    parser.add_argument("--sheet", default="Work History", help="Sheet name (default: 'Work History')")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show the plan without creating the file")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    print("Dataset generation plan:")
    print(f"  Output file: {args.output}")
    print(f"  Rows: {args.rows:,}")
    print(f"  Random seed: {args.seed}")
    if args.dry_run:
        print("\n[DRY RUN] Would generate the file but not creating it.")
        return 0

    try:
        create_excel_file(args.output, args.rows, args.sheet, args.seed)
    except Exception as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
