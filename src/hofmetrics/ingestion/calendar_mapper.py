"""Date parsing and calendar labels (months, quarters, weekdays)."""
from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..standards.naming import is_blank, normalize_key


SERIAL_EPOCH = date(1899, 12, 30)
DEFAULT_SERIAL_THRESHOLD = 1000.0

_DMY_RX = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})$")
_NUMERIC_RX = re.compile(r"^\d+(?:\.\d+)?$")
_YEAR_TOKEN_RX = re.compile(r"(20\d\d)")

MONTH_NAMES = (
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
)
# Monday-first, matching date.weekday()
WEEKDAY_NAMES = ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo")

_WEEKDAY_ALIASES = {
    0: ("lunes", "lun", "monday", "mon"),
    1: ("martes", "mar", "tuesday", "tue", "tues"),
    2: ("miercoles", "mie", "mier", "wednesday", "wed"),
    3: ("jueves", "jue", "thursday", "thu", "thur", "thurs"),
    4: ("viernes", "vie", "friday", "fri"),
    5: ("sabado", "sab", "saturday", "sat"),
    6: ("domingo", "dom", "sunday", "sun"),
}
_WEEKDAY_LOOKUP = {alias: idx for idx, aliases in _WEEKDAY_ALIASES.items() for alias in aliases}


def serial_to_date(serial: float) -> Optional[date]:
    """Spreadsheet serial day number -> date (epoch 1899-12-30)."""
    try:
        return SERIAL_EPOCH + timedelta(days=int(math.floor(serial)))
    except (OverflowError, ValueError):
        return None


def _build_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _generic_parse(text: str) -> Optional[date]:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(text, errors="coerce", dayfirst=True)
        except (ValueError, TypeError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def parse_date(value: Any, serial_threshold: float = DEFAULT_SERIAL_THRESHOLD) -> Optional[date]:
    """Best-effort date parse; returns None instead of raising.

    Order: date/datetime instance, spreadsheet serial number (> threshold),
    then for strings the first whitespace token as ISO, then D/M/Y or D-M-Y
    (2-digit years are 20xx), then a generic parse of the full string.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float, np.integer, np.floating)):
        n = float(value)
        if not math.isfinite(n) or n <= serial_threshold:
            return None
        return serial_to_date(n)
    if is_blank(value):
        return None

    text = str(value).strip()
    token = text.split()[0]
    if _NUMERIC_RX.match(token):
        n = float(token)
        if n > serial_threshold and not (len(token) == 4 and 1900 <= n <= 2100):
            return serial_to_date(n)
    try:
        return date.fromisoformat(token[:10])
    except ValueError:
        pass
    m = _DMY_RX.match(token)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if len(m.group(3)) == 2:
            year += 2000
        parsed = _build_date(year, month, day)
        if parsed is not None:
            return parsed
    return _generic_parse(text)


def extract_year(value: Any, serial_threshold: float = DEFAULT_SERIAL_THRESHOLD) -> Optional[int]:
    """Year from a year-ish cell: 2025, "2025", "Año 2025", or any parseable date."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        n = float(value)
        if math.isfinite(n) and n == int(n) and 1900 <= n <= 2200:
            return int(n)
    elif not is_blank(value):
        m = _YEAR_TOKEN_RX.search(str(value))
        if m:
            return int(m.group(1))
    parsed = parse_date(value, serial_threshold)
    return parsed.year if parsed else None


def year_from_name(name: str) -> Optional[int]:
    """Four-digit 20xx year token embedded in a sheet or table name."""
    m = _YEAR_TOKEN_RX.search(name or "")
    return int(m.group(1)) if m else None


def quarter_of(month: int) -> int:
    return (month - 1) // 3 + 1


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return str(month)


def weekday_index(label: Any) -> Optional[int]:
    """0=Lunes..6=Domingo from a Spanish/English, full/abbreviated label."""
    key = normalize_key(label).rstrip(".")
    if not key:
        return None
    return _WEEKDAY_LOOKUP.get(key)


def weekday_label(value: Any) -> str:
    """Canonical (Spanish) weekday label for a date or a weekday string."""
    if isinstance(value, date):
        return WEEKDAY_NAMES[value.weekday()]
    idx = weekday_index(value)
    return WEEKDAY_NAMES[idx] if idx is not None else ""
