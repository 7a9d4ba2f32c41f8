"""Decode raw bytes of delimited text or spreadsheet workbooks into row grids.

Readers never interpret cell values: serial dates stay numeric and number
strings stay strings. Interpretation is the job of the normalizers.
"""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from ..exceptions import SourceUnreadableError
from ..models import RawTable, SourceFormat
from ..standards.naming import is_blank


LOGGER = logging.getLogger("hofmetrics.ingestion.readers")

DELIMITED_EXTENSIONS = (".csv", ".tsv", ".txt")
WORKBOOK_EXTENSIONS = (".xlsx", ".xlsm", ".xls")

# Tie-break order: earlier wins when counts are equal.
_DELIMITER_PRIORITY = ("\t", ";", ",")
_TEXT_ENCODINGS = ("utf-8-sig", "cp1252")


def detect_source_format(path: str | Path) -> SourceFormat:
    """Infer the source format from the file extension."""

    suffix = Path(str(path)).suffix.lower()
    if suffix in WORKBOOK_EXTENSIONS:
        return SourceFormat.WORKBOOK
    if suffix in DELIMITED_EXTENSIONS:
        return SourceFormat.DELIMITED
    raise SourceUnreadableError(str(path), f"unsupported file extension '{suffix}'")


def detect_delimiter(text: str) -> str:
    """Pick the separator with the highest count in the first non-blank line.

    Tab beats semicolon and semicolon beats comma on equal counts; a line with
    no candidate at all falls back to comma.
    """

    first = next((line for line in text.splitlines() if line.strip()), "")
    best = ","
    best_count = 0
    for delim in _DELIMITER_PRIORITY:
        count = first.count(delim)
        if count > best_count:
            best, best_count = delim, count
    return best


def decode_text(data: bytes, path: str) -> str:
    for encoding in _TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise SourceUnreadableError(path, "text is not valid UTF-8 or cp1252")


def _drop_blank_rows(rows: Iterable[Sequence[object]]) -> List[List[object]]:
    return [list(r) for r in rows if any(not is_blank(c) for c in r)]


def read_delimited(data: bytes, path: str = "") -> RawTable:
    """Parse delimited text into a grid of strings.

    Quoted fields may contain the delimiter, doubled quotes and line breaks.
    CRLF / CR line endings are normalized and fully blank rows are dropped.
    """

    text = decode_text(data, path)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    delimiter = detect_delimiter(text)
    try:
        rows = list(csv.reader(io.StringIO(text), delimiter=delimiter, quotechar='"', doublequote=True, strict=False))
    except csv.Error as exc:
        raise SourceUnreadableError(path, f"malformed delimited text ({exc})") from exc
    name = Path(path).stem if path else ""
    LOGGER.debug("Delimited source %s parsed with delimiter %r (%d raw rows)", path, delimiter, len(rows))
    return RawTable(name=name, rows=_drop_blank_rows(rows))


def _frame_to_grid(df: pd.DataFrame) -> List[List[object]]:
    grid = df.astype(object).where(pd.notna(df), "")
    return grid.values.tolist()


def read_workbook(data: bytes, path: str = "", sheet: Optional[str] = None) -> tuple[List[RawTable], List[str]]:
    """Decode every sheet of a workbook (or only ``sheet``) into row grids.

    Returns the tables plus all sheet names present in the workbook. Blank
    cells default to ``""``; numeric cells, including serial dates that were
    not formatted as dates, are returned unchanged.
    """

    tables: List[RawTable] = []
    try:
        with pd.ExcelFile(io.BytesIO(data)) as xls:
            names = [str(n) for n in xls.sheet_names]
            for name in xls.sheet_names:
                if sheet is not None and str(name) != sheet:
                    continue
                df = xls.parse(name, header=None, dtype=object)
                tables.append(RawTable(name=str(name), rows=_drop_blank_rows(_frame_to_grid(df))))
    except Exception as exc:
        raise SourceUnreadableError(path, f"corrupt or unsupported workbook ({exc})") from exc
    if sheet is not None and not tables:
        LOGGER.warning("[WARNING] Sheet %r not found in %s; available: %s", sheet, path, names)
    return tables, names


def read_tables(data: bytes, source_format: SourceFormat, path: str = "", sheet: Optional[str] = None) -> tuple[List[RawTable], List[str]]:
    """Decode ``data`` into tables plus the list of sheet names available.

    Delimited text always yields a single table and no sheet names.
    """

    if source_format is SourceFormat.WORKBOOK:
        return read_workbook(data, path, sheet=sheet)
    return [read_delimited(data, path)], []
