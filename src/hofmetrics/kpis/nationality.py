"""Guest-nationality rankings by country and continent."""
from __future__ import annotations

from typing import List, Optional, Sequence

from ..common.config_validator import KpiFilter
from ..models import NationalityRecord, RankingEntry
from .filters import filter_nationality
from .rankings import rank


DEFAULT_TOP_COUNTRIES = 12


def _counted(records: Sequence[NationalityRecord], flt: KpiFilter) -> List[NationalityRecord]:
    return [r for r in filter_nationality(records, flt) if r.count > 0]


def country_ranking(records: Sequence[NationalityRecord], flt: KpiFilter, top_n: Optional[int] = DEFAULT_TOP_COUNTRIES) -> List[RankingEntry]:
    """Countries by guest count; shares are relative to all countries, not just the top N."""
    return rank(((r.country, r.count) for r in _counted(records, flt)), top_n=top_n)


def continent_ranking(records: Sequence[NationalityRecord], flt: KpiFilter) -> List[RankingEntry]:
    return rank((r.continent, r.count) for r in _counted(records, flt))


def total_guests(records: Sequence[NationalityRecord], flt: KpiFilter) -> float:
    return float(sum(r.count for r in _counted(records, flt)))
