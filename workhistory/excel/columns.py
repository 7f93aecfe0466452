from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.column_mapping import NOT_FOUND, CanonicalField, ColumnMapping, ColumnMatch, Found
from .aliases import FIELD_ALIASES

"""Column resolver.

Maps arbitrary spreadsheet headers onto the canonical fields using the
alias table. Resolution runs once per import over a bounded sample of rows
and the result is reused for the whole sheet, so a header that only shows
up after the sample is never seen.
"""

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_header(name: Any) -> str:
    """Lowercase and drop all whitespace."""
    return _WHITESPACE_RE.sub("", str(name).lower())


def find_column(row: Mapping[str, Any], aliases: Sequence[str]) -> ColumnMatch:
    """Find the header in ``row`` carrying one of ``aliases``.

    Rules, evaluated top to bottom:
    1. first alias present verbatim as a header key
    2. first alias (priority order) whose normalized form equals the
       normalized form of some header; the first such header in row order
       is returned
    3. NotFound
    """
    for alias in aliases:
        if alias in row:
            return Found(alias)

    normalized_keys = [(normalize_header(k), k) for k in row.keys()]
    for alias in aliases:
        target = normalize_header(alias)
        for norm, key in normalized_keys:
            if norm == target:
                return Found(key)

    return NOT_FOUND


def resolve_columns(
    sample_rows: Sequence[Mapping[str, Any]],
    alias_table: Mapping[CanonicalField, Sequence[str]] | None = None,
) -> ColumnMapping:
    """Resolve a ColumnMapping from sample rows.

    Rows are scanned in order; a field resolved from an earlier row is
    never replaced by a later one. Fields nobody resolves are simply absent.
    """
    table = FIELD_ALIASES if alias_table is None else alias_table
    resolved: dict[CanonicalField, str] = {}
    for row in sample_rows:
        for canonical, aliases in table.items():
            if canonical in resolved:
                continue
            match = find_column(row, aliases)
            if isinstance(match, Found):
                resolved[canonical] = match.column
        if len(resolved) == len(table):
            break

    mapping = ColumnMapping(columns=resolved)
    logger.debug("column mapping resolved: %s", mapping.as_dict())
    return mapping
