"""Generic group-sum-rank with share of total."""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import pandas as pd

from ..models import RankingEntry
from .filters import safe_div


def rank(pairs: Iterable[Tuple[str, float]], top_n: Optional[int] = None) -> List[RankingEntry]:
    """Group ``(label, value)`` pairs, sum per label and sort descending.

    Shares are computed against the total of every group, before ``top_n``
    truncation. Ties keep first-seen order.
    """

    df = pd.DataFrame(list(pairs), columns=["label", "value"])
    if df.empty:
        return []
    df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0)
    totals = df.groupby("label", sort=False)["value"].sum()
    total = float(totals.sum())
    ordered = totals.sort_values(ascending=False, kind="mergesort")
    if top_n is not None and top_n > 0:
        ordered = ordered.head(top_n)
    return [RankingEntry(label=str(label), value=float(value), share=safe_div(float(value), total)) for label, value in ordered.items()]
