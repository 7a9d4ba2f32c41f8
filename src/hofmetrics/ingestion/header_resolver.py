"""Locate the header row of a loosely structured table and map it to canonical fields."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..models import HeaderResolution
from ..standards.fields import RecordSchema
from ..standards.naming import is_blank, normalize_header


LOGGER = logging.getLogger("hofmetrics.ingestion.header_resolver")

DEFAULT_SCAN_ROWS = 12
DEFAULT_MIN_FILLED = 3


def detect_header_row(rows: Sequence[Sequence[object]], scan_rows: int = DEFAULT_SCAN_ROWS, min_filled: int = DEFAULT_MIN_FILLED) -> int:
    """Index of the first row (within ``scan_rows``) with ``min_filled`` non-blank cells.

    Falls back to 0 when no scanned row qualifies.
    """
    for idx, row in enumerate(rows[:scan_rows]):
        filled = sum(1 for cell in row if not is_blank(cell))
        if filled >= min_filled:
            return idx
    return 0


def match_columns(headers: Sequence[str], schema: RecordSchema) -> Dict[str, int]:
    """Map canonical field names to column indexes.

    Every field first gets an exact-match pass over its synonyms; only fields
    still unresolved afterwards are tried by containment (header contains
    synonym), skipping exact-only synonyms. A column is claimed by at most one field, and the first column
    wins when several headers match the same synonym.
    """

    columns: Dict[str, int] = {}
    claimed: set[int] = set()

    for spec in schema.fields:
        for synonym in spec.synonyms:
            idx = _find(headers, claimed, lambda h, s=synonym: h == s)
            if idx is not None:
                columns[spec.name] = idx
                claimed.add(idx)
                break

    for spec in schema.fields:
        if spec.name in columns:
            continue
        for synonym in spec.containment_synonyms:
            idx = _find(headers, claimed, lambda h, s=synonym: s in h)
            if idx is not None:
                columns[spec.name] = idx
                claimed.add(idx)
                break
    return columns


def _find(headers: Sequence[str], claimed: set[int], predicate) -> Optional[int]:
    for idx, header in enumerate(headers):
        if idx in claimed or not header:
            continue
        if predicate(header):
            return idx
    return None


def resolve_headers(
    rows: Sequence[Sequence[object]],
    schema: RecordSchema,
    scan_rows: int = DEFAULT_SCAN_ROWS,
    min_filled: int = DEFAULT_MIN_FILLED,
    table: str = "",
) -> HeaderResolution:
    """Detect the header row in ``rows`` and resolve it against ``schema``."""

    if not rows:
        return HeaderResolution(header_index=0, headers=(), columns={}, unresolved=tuple(schema.field_names))

    header_index = detect_header_row(rows, scan_rows, min_filled)
    raw_headers = rows[header_index]
    headers = tuple(normalize_header(h) for h in raw_headers)
    columns = match_columns(headers, schema)
    unresolved = tuple(name for name in schema.field_names if name not in columns)

    display = tuple("" if is_blank(h) else " ".join(str(h).split()) for h in raw_headers)
    resolution = HeaderResolution(header_index=header_index, headers=display, columns=columns, unresolved=unresolved)
    LOGGER.debug(
        "Table %r: header row %d resolved %s; unresolved %s",
        table,
        header_index,
        resolution.as_mapping(),
        list(unresolved),
    )
    return resolution


def data_rows(rows: Sequence[Sequence[object]], resolution: HeaderResolution) -> List[Sequence[object]]:
    """Rows below the header row; titles and notes above it are discarded."""
    return list(rows[resolution.header_index + 1:])
