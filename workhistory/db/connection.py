from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2
import psycopg2.extras

from ..models.config_models import DatabaseConfig

"""PostgreSQL connection helper.

Connection parameters, highest priority first:
    1. DATABASE_URL / PGDSN (whole DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the config file
``.env`` is loaded by the CLI (override mode) before any of this runs.
"""

logger = logging.getLogger(__name__)


def build_dsn(db_cfg: DatabaseConfig) -> str:
    dsn_env = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn_env:
        return dsn_env
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(db_cfg: DatabaseConfig, *, dict_rows: bool = False) -> Iterator[Any]:
    """Yield a cursor on a fresh connection; transactions are explicit.

    With ``dict_rows`` rows come back as dicts (RealDictCursor).
    """
    conn = psycopg2.connect(build_dsn(db_cfg))
    conn.autocommit = True  # BEGIN / COMMIT are issued by the caller
    cur = None
    try:
        if dict_rows:
            cur = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        else:
            cur = conn.cursor()
        yield cur
    finally:
        if cur is not None:
            try:
                cur.close()
            except psycopg2.Error:  # pragma: no cover
                logger.debug("cursor close failed", exc_info=True)
        conn.close()
