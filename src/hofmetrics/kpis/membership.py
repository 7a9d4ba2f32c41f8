"""Membership-tier KPIs: tier ranking, tier and hotel comparisons, Elite mix."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ..common.config_validator import KpiFilter
from ..ingestion.id_normalizer import OTHER, TIERS, bucket_tier
from ..models import EliteMix, GroupComparison, MembershipRecord, RankingEntry
from .filters import filter_membership, safe_div
from .operations import point_delta, ratio_delta
from .rankings import rank


TIER_ORDER = [t.label for t in TIERS] + [OTHER.label]


def tier_totals(records: Iterable[MembershipRecord]) -> Dict[str, int]:
    """Member count per bucketed tier label, in canonical tier order."""
    totals = {label: 0 for label in TIER_ORDER}
    for r in records:
        totals[bucket_tier(r.tier).label] += r.count
    return totals


def tier_ranking(records: Sequence[MembershipRecord], flt: KpiFilter, top_n: Optional[int] = None) -> List[RankingEntry]:
    selected = filter_membership(records, flt)
    return rank(((bucket_tier(r.tier).label, r.count) for r in selected if r.count > 0), top_n=top_n)


def _compare(current: Dict[str, int], base: Dict[str, int], order: Iterable[str]) -> List[GroupComparison]:
    total = sum(current.values())
    out = []
    for label in order:
        cur = current.get(label, 0)
        prev = base.get(label, 0)
        if not cur and not prev:
            continue
        out.append(GroupComparison(label=label, current=cur, base=prev, share=safe_div(cur, total), delta=ratio_delta(cur, prev)))
    return out


def tier_comparison(records: Sequence[MembershipRecord], flt: KpiFilter) -> List[GroupComparison]:
    """Per-tier totals for the target year vs the base year; tiers absent in both are omitted."""
    current = tier_totals(filter_membership(records, flt))
    base = tier_totals(filter_membership(records, flt, year=flt.base_year))
    return _compare(current, base, TIER_ORDER)


def elite_mix(records: Sequence[MembershipRecord], flt: KpiFilter) -> EliteMix:
    """Elite share of all members, target vs base year, as a percentage-point delta.

    The delta has no base only when the base year has no members at all; an
    Elite count of 0 against a non-zero total is a real 0% share.
    """

    current = filter_membership(records, flt)
    base = filter_membership(records, flt, year=flt.base_year)
    cur_elite = sum(r.count for r in current if bucket_tier(r.tier).elite)
    cur_total = sum(r.count for r in current)
    base_elite = sum(r.count for r in base if bucket_tier(r.tier).elite)
    base_total = sum(r.count for r in base)

    cur_share = safe_div(cur_elite, cur_total)
    base_share = safe_div(base_elite, base_total) if base_total > 0 else None
    return EliteMix(
        current_elite=cur_elite,
        current_total=cur_total,
        current_share=cur_share,
        base_elite=base_elite,
        base_total=base_total,
        base_share=base_share,
        delta=point_delta(cur_share, base_share),
    )


def membership_by_hotel(records: Sequence[MembershipRecord], flt: KpiFilter) -> List[GroupComparison]:
    """Member totals per hotel, target vs base year, ordered by current total."""

    def totals(rows: Iterable[MembershipRecord]) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for r in rows:
            out[r.hotel] = out.get(r.hotel, 0) + r.count
        return out

    current = totals(filter_membership(records, flt))
    base = totals(filter_membership(records, flt, year=flt.base_year))
    order = sorted(set(current) | set(base), key=lambda h: (-current.get(h, 0), h))
    return _compare(current, base, order)
