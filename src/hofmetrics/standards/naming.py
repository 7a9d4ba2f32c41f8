"""Centralized text normalization for headers, labels and lookup keys."""
from __future__ import annotations

import re
import unicodedata

import pandas as pd

_WS = re.compile(r"\s+")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip() == ""


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def collapse_ws(text: str) -> str:
    return _WS.sub(" ", text).strip()


def normalize_header(value: object) -> str:
    """Trim, collapse embedded newlines/whitespace, uppercase and drop diacritics.

    "Año" -> "ANO", "Total\\nOcc." -> "TOTAL OCC.", "  país " -> "PAIS".
    """
    if is_blank(value):
        return ""
    return strip_accents(collapse_ws(str(value))).upper()


def normalize_key(value: object) -> str:
    """Lowercase accent-insensitive key used for label grouping."""
    if is_blank(value):
        return ""
    return strip_accents(collapse_ws(str(value))).lower()
