from __future__ import annotations

import math
import re
from typing import Any

import numpy as np


_LEADING_CURRENCY_RX = re.compile(r"^(?:US\$|USD|ARS|AR\$|U\$S|\$|€|£)", re.IGNORECASE)
_SPACES_RX = re.compile(r"[\s ]+")

# Values above this are read as 0-100 percentages, at or below as 0-1 fractions.
FRACTION_THRESHOLD = 1.5


def _finite_or_zero(value: float) -> float:
    return float(value) if math.isfinite(value) else 0.0


def to_number(value: Any) -> float:
    """Parse a locale-ambiguous number; unparseable input yields 0.

    - "5.251.930,33" -> 5251930.33 (both marks: "." thousands, "," decimal)
    - "22,5"         -> 22.5       (only ",": decimal mark)
    - "1234.5"       -> 1234.5
    - "$ 1.200,50" / "USD 300" strip a leading currency marker
    - "59,40%"       -> 59.4       (trailing "%" dropped, no scaling)
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, np.integer, np.floating)):
        return _finite_or_zero(float(value))
    s = _SPACES_RX.sub("", str(value))
    if not s:
        return 0.0
    s = _LEADING_CURRENCY_RX.sub("", s)
    if s.endswith("%"):
        s = s[:-1]
    if "," in s and "." in s:
        s = s.replace(".", "").replace(",", ".")
    elif "," in s:
        s = s.replace(",", ".")
    try:
        return _finite_or_zero(float(s))
    except ValueError:
        return 0.0


def to_fraction(value: Any) -> float:
    """Convert a percentage-ish value into a 0-1 fraction.

    Numbers strictly above 1.5 are treated as 0-100 percentages and divided
    by 100; 1.5 and below are assumed to be fractions already. Values between
    1.0 and 1.5 are inherently ambiguous and are kept as-is.
    """

    n = to_number(value)
    if n > FRACTION_THRESHOLD:
        return n / 100.0
    return n


def clamp01(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


def to_count(value: Any) -> int:
    """Non-negative integer count (rooms, persons, members)."""
    return max(0, int(round(to_number(value))))


def to_amount(value: Any) -> float:
    """Non-negative currency amount."""
    return max(0.0, to_number(value))
