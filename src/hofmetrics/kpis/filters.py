"""Record filtering by year, hotel, History/Forecast mode and period."""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, TypeVar

from ..common.config_validator import KpiFilter
from ..ingestion.calendar_mapper import quarter_of
from ..models import HofFlag, HofMode, MembershipRecord, NationalityRecord, OperationalDayRecord


R = TypeVar("R")


def safe_div(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or 0 when the denominator is 0 or the result is not finite."""
    if not denominator:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def hof_matches(flag: HofFlag, mode: HofMode) -> bool:
    if mode is HofMode.ALL:
        return True
    return flag.value == mode.value


def period_matches(month: Optional[int], flt: KpiFilter) -> bool:
    """Month/quarter filter; undated records only pass when no period is selected."""
    if not flt.month and not flt.quarter:
        return True
    if month is None:
        return False
    if flt.month and month != flt.month:
        return False
    if flt.quarter and quarter_of(month) != flt.quarter:
        return False
    return True


def _hotel_ok(hotel: str, flt: KpiFilter) -> bool:
    hotels = flt.hotel_set()
    return hotels is None or hotel in hotels


def filter_operational(
    records: Iterable[OperationalDayRecord],
    flt: KpiFilter,
    year: Optional[int] = None,
    with_period: bool = True,
) -> List[OperationalDayRecord]:
    """Operational-day records for ``year`` (default: ``flt.year``) matching the filter."""
    target = flt.year if year is None else year
    return [
        r
        for r in records
        if r.year == target
        and _hotel_ok(r.hotel, flt)
        and hof_matches(r.hof, flt.hof)
        and (not with_period or period_matches(r.month, flt))
    ]


def filter_membership(
    records: Iterable[MembershipRecord],
    flt: KpiFilter,
    year: Optional[int] = None,
    with_hotel: bool = True,
) -> List[MembershipRecord]:
    target = flt.year if year is None else year
    return [
        r
        for r in records
        if r.year == target
        and (not with_hotel or _hotel_ok(r.hotel, flt))
        and period_matches(r.month, flt)
    ]


def filter_nationality(
    records: Iterable[NationalityRecord],
    flt: KpiFilter,
    year: Optional[int] = None,
) -> List[NationalityRecord]:
    """Nationality records for the year; rows without a hotel drop out once a hotel is selected."""
    target = flt.year if year is None else year
    hotels = flt.hotel_set()
    return [
        r
        for r in records
        if r.year == target
        and (hotels is None or (r.hotel and r.hotel in hotels))
        and period_matches(r.month, flt)
    ]


def only(records: Sequence[object], record_type: type[R]) -> List[R]:
    return [r for r in records if isinstance(r, record_type)]
