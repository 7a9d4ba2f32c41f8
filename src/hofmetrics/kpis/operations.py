"""Weighted operational KPIs: aggregates, year-over-base deltas, period views.

All averages are weighted by room-weight ``max(0, total occupied - house use)``
and every division is safe (0 on a zero denominator), so no aggregate is ever
NaN or infinite.
"""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..common.config_validator import KpiFilter
from ..ingestion.calendar_mapper import WEEKDAY_NAMES, month_name, quarter_of, weekday_index
from ..models import (
    Aggregate,
    DeltaKind,
    DeltaResult,
    MonthComparison,
    MonthlySeries,
    OperationalDayRecord,
    PeriodComparison,
    PeriodRankingItem,
    SliceItem,
)
from .filters import filter_operational, safe_div


KPI_FIELDS = ("occupancy", "average_rate", "revenue", "double_occupancy", "revpar")
FRAME_COLUMNS = [
    "date",
    "year",
    "month",
    "quarter",
    "hotel",
    "hof",
    "weekday",
    "occupancy",
    "average_rate",
    "room_revenue",
    "persons_in_house",
    "weight",
]
SLICE_KEYS = ("year", "quarter", "month")
DEFAULT_TOP_MONTHS = 12


def to_frame(records: Iterable[OperationalDayRecord]) -> pd.DataFrame:
    rows = [
        {
            "date": r.date,
            "year": r.year,
            "month": r.month,
            "quarter": quarter_of(r.month),
            "hotel": r.hotel,
            "hof": r.hof.value,
            "weekday": r.weekday,
            "occupancy": r.occupancy,
            "average_rate": r.average_rate,
            "room_revenue": r.room_revenue,
            "persons_in_house": r.persons_in_house,
            "weight": r.weight,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def aggregate_frame(df: pd.DataFrame) -> Aggregate:
    if df.empty:
        return Aggregate()
    weight = float(df["weight"].sum())
    occupancy = safe_div(float((df["occupancy"] * df["weight"]).sum()), weight)
    average_rate = safe_div(float((df["average_rate"] * df["weight"]).sum()), weight)
    persons = float(df["persons_in_house"].sum())
    return Aggregate(
        occupancy=occupancy,
        average_rate=average_rate,
        revenue=float(df["room_revenue"].sum()),
        double_occupancy=safe_div(persons, max(1.0, weight)),
        # operational proxy, not revenue / available rooms
        revpar=average_rate * occupancy,
        persons=persons,
        weight=weight,
        days=int(df["date"].nunique()),
    )


def aggregate(records: Iterable[OperationalDayRecord]) -> Aggregate:
    """Weighted occupancy, rate, revenue, double occupancy and RevPAR proxy."""
    return aggregate_frame(to_frame(records))


def ratio_delta(current: float, base: float) -> DeltaResult:
    """``(current - base) / base``; flagged ``no_base`` when base is 0 or either side is not finite."""
    if not base or not math.isfinite(base) or not math.isfinite(current):
        return DeltaResult(current=current, base=base, change=None, no_base=True)
    return DeltaResult(current=current, base=base, change=(current - base) / base, no_base=False)


def point_delta(current_share: float, base_share: Optional[float]) -> DeltaResult:
    """Percentage-point difference between two shares given as fractions.

    Only a missing base share (``None``) sets ``no_base``; a base share of 0
    is a valid comparison.
    """
    if base_share is None:
        return DeltaResult(current=current_share, base=0.0, change=None, no_base=True, kind=DeltaKind.POINTS)
    return DeltaResult(
        current=current_share,
        base=base_share,
        change=(current_share - base_share) * 100.0,
        no_base=False,
        kind=DeltaKind.POINTS,
    )


def compare_aggregates(current: Aggregate, base: Aggregate) -> Dict[str, DeltaResult]:
    return {name: ratio_delta(getattr(current, name), getattr(base, name)) for name in KPI_FIELDS}


def compare_periods(records: Sequence[OperationalDayRecord], flt: KpiFilter) -> PeriodComparison:
    """Target year vs base year under the same hotel, HoF and period filter."""
    current = aggregate(filter_operational(records, flt))
    base = aggregate(filter_operational(records, flt, year=flt.base_year))
    return PeriodComparison(current=current, base=base, deltas=compare_aggregates(current, base))


def monthly_series(records: Sequence[OperationalDayRecord], flt: KpiFilter) -> MonthlySeries:
    """Month-by-month comparison of the target year against the base year.

    When the base year has fewer distinct months than the target year the
    comparison is restricted to the months present in both and
    ``incomplete_base`` is set.
    """

    current_df = to_frame(filter_operational(records, flt))
    base_df = to_frame(filter_operational(records, flt, year=flt.base_year))
    current_months = set(int(m) for m in current_df["month"].unique())
    base_months = set(int(m) for m in base_df["month"].unique())

    incomplete = bool(base_months) and len(base_months) < len(current_months)
    if incomplete:
        months = sorted(current_months & base_months)
    else:
        months = sorted(current_months | base_months)

    items: List[MonthComparison] = []
    for month in months:
        cur = aggregate_frame(current_df[current_df["month"] == month])
        base = aggregate_frame(base_df[base_df["month"] == month])
        items.append(MonthComparison(month=month, label=month_name(month), current=cur, base=base, deltas=compare_aggregates(cur, base)))

    return MonthlySeries(
        months=items,
        incomplete_base=incomplete,
        compared_months=tuple(months),
        current_total=aggregate_frame(current_df[current_df["month"].isin(months)]),
        base_total=aggregate_frame(base_df[base_df["month"].isin(months)]),
    )


def _check_metric(metric: str) -> None:
    if metric not in KPI_FIELDS:
        raise ValueError(f"Unsupported ranking metric '{metric}'. Expected one of {KPI_FIELDS}")


def _rank_items(items: List[PeriodRankingItem]) -> List[PeriodRankingItem]:
    return sorted(items, key=lambda item: item.value, reverse=True)


def month_ranking(
    records: Sequence[OperationalDayRecord],
    flt: KpiFilter,
    metric: str = "occupancy",
    top_n: Optional[int] = DEFAULT_TOP_MONTHS,
) -> List[PeriodRankingItem]:
    """Months of the target year ranked by ``metric`` (an ``Aggregate`` field), descending."""
    _check_metric(metric)
    df = to_frame(filter_operational(records, flt))
    items = []
    for month, group in df.groupby("month", sort=True):
        agg = aggregate_frame(group)
        items.append(PeriodRankingItem(key=str(int(month)), label=month_name(int(month)), value=getattr(agg, metric), aggregate=agg))
    ranked = _rank_items(items)
    if top_n is not None and top_n > 0:
        ranked = ranked[:top_n]
    return ranked


def weekday_ranking(records: Sequence[OperationalDayRecord], flt: KpiFilter, metric: str = "occupancy") -> List[PeriodRankingItem]:
    """The seven weekdays, independent of month, ranked by ``metric``."""
    _check_metric(metric)
    df = to_frame(filter_operational(records, flt))
    if df.empty:
        return []
    df["weekday_idx"] = df["weekday"].map(weekday_index)
    missing = df["weekday_idx"].isna()
    if missing.any():
        df.loc[missing, "weekday_idx"] = df.loc[missing, "date"].map(lambda d: d.weekday())
    items = []
    for idx, group in df.groupby("weekday_idx", sort=True):
        agg = aggregate_frame(group)
        items.append(PeriodRankingItem(key=str(int(idx)), label=WEEKDAY_NAMES[int(idx)], value=getattr(agg, metric), aggregate=agg))
    return _rank_items(items)


def _slice_label(by: str, key: int, year: int) -> str:
    if by == "month":
        return f"{month_name(key)} {year}"
    if by == "quarter":
        return f"Q{key} {year}"
    return str(key)


def slice_by(records: Sequence[OperationalDayRecord], flt: KpiFilter, by: str = "month") -> List[SliceItem]:
    """Aggregate per year, quarter or month, in calendar order.

    Quarter and month slices cover the target year; year slices cover every
    year in the record set under the same hotel, HoF and period filter.
    """
    if by not in SLICE_KEYS:
        raise ValueError(f"Unsupported slice '{by}'. Expected one of {SLICE_KEYS}")
    if by == "year":
        selected = [r for year in available_years(records) for r in filter_operational(records, flt, year=year)]
    else:
        selected = filter_operational(records, flt)
    df = to_frame(selected)
    items = []
    for key, group in df.groupby(by, sort=True):
        key = int(key)
        items.append(SliceItem(key=str(key), label=_slice_label(by, key, flt.year), aggregate=aggregate_frame(group)))
    return items


def available_years(records: Iterable[object]) -> List[int]:
    """Distinct years present in a record set, ascending."""
    return sorted({int(r.year) for r in records if getattr(r, "year", None)})


def detected_hotels(records: Iterable[object]) -> List[str]:
    return sorted({r.hotel for r in records if getattr(r, "hotel", "")})
