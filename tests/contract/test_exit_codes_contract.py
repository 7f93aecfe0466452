from __future__ import annotations

from pathlib import Path

from workhistory.cli import main as cli_main
from workhistory.cli.__main__ import EXIT_FATAL, EXIT_SUCCESS

"""Exit code contract: 0 success, 1 fatal (config, unreadable workbook, database)."""


def test_exit_code_values():
    assert EXIT_SUCCESS == 0
    assert EXIT_FATAL == 1


def test_invalid_config_is_fatal(temp_workdir: Path):
    (temp_workdir / "config" / "import.yml").write_text("import:\n  batch_size: -1\n", encoding="utf-8")
    assert cli_main(["import", "data/a.xlsx", "--dry-run"]) == EXIT_FATAL


def test_garbage_rows_still_succeed(write_config, make_workbook):
    rows = [{"Job": None, "Work": "n/a", "Date": "someday"}, {"Job": 1, "Work": -3, "Date": 10**7}]
    path = make_workbook({"Ops": rows})
    assert cli_main(["import", str(path), "--dry-run"]) == EXIT_SUCCESS


def test_config_schema_file_is_valid_json_schema():
    import json

    import jsonschema

    from workhistory.config.loader import SCHEMA_PATH

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.Draft7Validator.check_schema(schema)
