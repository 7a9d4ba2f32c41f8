"""Turn resolved rows into typed records or structured rejections.

Each builder returns either a record or a ``RowRejection``. Rejections are
non-fatal: the loader counts them by reason and keeps going.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Union

from ..models import (
    HeaderResolution,
    MembershipRecord,
    NationalityRecord,
    OperationalDayRecord,
    RecordKind,
    RowRejection,
)
from ..standards.naming import collapse_ws, is_blank
from .calendar_mapper import DEFAULT_SERIAL_THRESHOLD, extract_year, parse_date, weekday_label, year_from_name
from .id_normalizer import normalize_continent, normalize_country, normalize_hotel, parse_hof
from .metric_normalizer import clamp01, to_amount, to_count, to_fraction, to_number


REASON_MISSING_DATE = "missing_date"
REASON_MISSING_YEAR = "missing_year"
REASON_MISSING_HOTEL = "missing_hotel"
REASON_MISSING_TIER = "missing_tier"
REASON_MISSING_COUNTRY = "missing_country"
REASON_INVALID_ROW = "invalid_row"

BuildOutcome = Union[OperationalDayRecord, MembershipRecord, NationalityRecord, RowRejection]


class RowView:
    """Read access to one raw row through a header resolution."""

    def __init__(self, row: Sequence[object], resolution: HeaderResolution) -> None:
        self._row = row
        self._columns = resolution.columns

    def get(self, field_name: str) -> object:
        idx = self._columns.get(field_name)
        if idx is None or idx >= len(self._row):
            return None
        value = self._row[idx]
        return None if is_blank(value) else value

    def text(self, field_name: str) -> str:
        value = self.get(field_name)
        return "" if value is None else collapse_ws(str(value))


def build_operational_day(
    view: RowView,
    row_number: int,
    table: str = "",
    serial_threshold: float = DEFAULT_SERIAL_THRESHOLD,
) -> BuildOutcome:
    day = parse_date(view.get("date"), serial_threshold)
    if day is None:
        return RowRejection(row_number, REASON_MISSING_DATE, table)
    hotel = normalize_hotel(view.get("hotel"))
    if not hotel:
        return RowRejection(row_number, REASON_MISSING_HOTEL, table)

    weekday = weekday_label(view.get("weekday")) or weekday_label(day)
    return OperationalDayRecord(
        date=day,
        hotel=hotel,
        hof=parse_hof(view.get("hof")),
        occupancy=clamp01(to_fraction(view.get("occupancy"))),
        average_rate=to_amount(view.get("average_rate")),
        room_revenue=to_amount(view.get("room_revenue")),
        total_occupied_rooms=to_count(view.get("total_occupied_rooms")),
        house_use_rooms=to_count(view.get("house_use_rooms")),
        persons_in_house=to_count(view.get("persons_in_house")),
        weekday=weekday,
    )


def _resolve_year(view: RowView, table: str, serial_threshold: float):
    """Date column first, then an explicit year column, then a 20xx token in the table name."""
    day = parse_date(view.get("date"), serial_threshold)
    if day is not None:
        return day, day.year
    year = extract_year(view.get("year"), serial_threshold)
    if year is None:
        year = year_from_name(table)
    return None, year


def build_membership(
    view: RowView,
    row_number: int,
    table: str = "",
    serial_threshold: float = DEFAULT_SERIAL_THRESHOLD,
) -> BuildOutcome:
    hotel = normalize_hotel(view.get("hotel"))
    if not hotel:
        return RowRejection(row_number, REASON_MISSING_HOTEL, table)
    tier = view.text("tier")
    if not tier:
        return RowRejection(row_number, REASON_MISSING_TIER, table)
    day, year = _resolve_year(view, table, serial_threshold)
    if year is None:
        return RowRejection(row_number, REASON_MISSING_YEAR, table)
    return MembershipRecord(year=year, hotel=hotel, tier=tier, count=to_count(view.get("count")), date=day)


def build_nationality(
    view: RowView,
    row_number: int,
    table: str = "",
    serial_threshold: float = DEFAULT_SERIAL_THRESHOLD,
) -> BuildOutcome:
    country = normalize_country(view.get("country"))
    if not country:
        return RowRejection(row_number, REASON_MISSING_COUNTRY, table)
    day, year = _resolve_year(view, table, serial_threshold)
    if year is None:
        return RowRejection(row_number, REASON_MISSING_YEAR, table)
    return NationalityRecord(
        year=year,
        country=country,
        continent=normalize_continent(view.get("continent")),
        count=max(0.0, to_number(view.get("count"))),
        date=day,
        hotel=normalize_hotel(view.get("hotel")),
    )


BUILDERS: Dict[RecordKind, Callable[..., BuildOutcome]] = {
    RecordKind.OPERATIONAL_DAY: build_operational_day,
    RecordKind.MEMBERSHIP: build_membership,
    RecordKind.NATIONALITY: build_nationality,
}


def build_record(
    kind: RecordKind,
    row: Sequence[object],
    resolution: HeaderResolution,
    row_number: int,
    table: str = "",
    serial_threshold: Optional[float] = None,
) -> BuildOutcome:
    """Build one record of ``kind`` from a raw data row."""
    threshold = DEFAULT_SERIAL_THRESHOLD if serial_threshold is None else serial_threshold
    return BUILDERS[kind](RowView(row, resolution), row_number, table, threshold)
