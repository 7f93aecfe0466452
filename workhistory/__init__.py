"""Work-history spreadsheet importer and production-performance reports."""

__version__ = "0.1.0"
