"""
KPI aggregation over typed record sets: weighted operational aggregates,
year-over-base deltas, rankings and mix breakdowns.
"""

from .filters import safe_div
from .operations import aggregate, compare_periods, monthly_series, point_delta, ratio_delta
from .rankings import rank

__all__ = ["aggregate", "compare_periods", "monthly_series", "point_delta", "rank", "ratio_delta", "safe_div"]
