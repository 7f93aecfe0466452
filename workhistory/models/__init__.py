"""Domain models for the work-history import tool.

This package contains the value objects shared by the importer, the
persistence layer and the reporting services.
"""

from .column_mapping import CanonicalField, ColumnMapping, Found, NotFound
from .config_models import DatabaseConfig, ImportSettings
from .work_record import RECORD_COLUMNS, WorkHistoryRecord

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportSettings",
    # Import models
    "CanonicalField",
    "ColumnMapping",
    "Found",
    "NotFound",
    "RECORD_COLUMNS",
    "WorkHistoryRecord",
]
