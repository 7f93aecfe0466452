from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the work-history import tool.

These are the typed views handed to the services; the YAML loading and
schema validation live in workhistory.config.loader.
"""

DEFAULT_BATCH_SIZE = 1000
DEFAULT_SAMPLE_SIZE = 20
DEFAULT_LABOR_RATE = 199.0
DEFAULT_WORK_CENTER = "Default"
DEFAULT_COMPANY = "Unknown"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportSettings:
    """Knobs for the import core.

    The transform defaults are passed explicitly into the row transformer
    so that a deployment (or a test) can change them without touching code.
    """
    batch_size: int = DEFAULT_BATCH_SIZE  # rows per batch between progress updates
    sample_size: int = DEFAULT_SAMPLE_SIZE  # rows inspected for column resolution
    labor_rate: float = DEFAULT_LABOR_RATE  # $/hour when the sheet has no rate column
    default_work_center: str = DEFAULT_WORK_CENTER
    default_company: str = DEFAULT_COMPANY
