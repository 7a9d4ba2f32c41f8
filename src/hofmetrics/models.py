"""Typed records and query-time result containers.

Records are created once by the record builders and never mutated; the
aggregation layer only ever reads them. Result containers (``Aggregate``,
``RankingEntry``, ``DeltaResult``) carry plain values in consistent units:
fractions in 0..1 for rates and base currency units for money.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class HofFlag(str, Enum):
    HISTORY = "History"
    FORECAST = "Forecast"
    UNKNOWN = "Unknown"


class HofMode(str, Enum):
    HISTORY = "History"
    FORECAST = "Forecast"
    ALL = "All"


class RecordKind(str, Enum):
    OPERATIONAL_DAY = "operational_day"
    MEMBERSHIP = "membership"
    NATIONALITY = "nationality"


class SourceFormat(str, Enum):
    DELIMITED = "delimited"
    WORKBOOK = "workbook"


class IngestStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    UNREADABLE = "unreadable"
    DISCARDED = "discarded"


class DeltaKind(str, Enum):
    RATIO = "ratio"
    POINTS = "points"


@dataclass(frozen=True)
class OperationalDayRecord:
    date: date
    hotel: str
    hof: HofFlag = HofFlag.UNKNOWN
    occupancy: float = 0.0
    average_rate: float = 0.0
    room_revenue: float = 0.0
    total_occupied_rooms: int = 0
    house_use_rooms: int = 0
    persons_in_house: int = 0
    weekday: str = ""

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def weight(self) -> int:
        """Room-weight used for occupancy and rate averages."""
        return max(0, self.total_occupied_rooms - self.house_use_rooms)


@dataclass(frozen=True)
class MembershipRecord:
    year: int
    hotel: str
    tier: str
    count: int = 0
    date: Optional[date] = None

    @property
    def month(self) -> Optional[int]:
        return self.date.month if self.date else None


@dataclass(frozen=True)
class NationalityRecord:
    year: int
    country: str
    continent: str
    count: float = 0.0
    date: Optional[date] = None
    hotel: str = ""

    @property
    def month(self) -> Optional[int]:
        return self.date.month if self.date else None


@dataclass(frozen=True)
class RowRejection:
    """Structured reason a raw row did not become a record."""

    row_number: int
    reason: str
    table: str = ""


@dataclass(frozen=True)
class HeaderResolution:
    """Outcome of locating and mapping a table's header row."""

    header_index: int
    headers: Tuple[str, ...]
    columns: Dict[str, int]
    unresolved: Tuple[str, ...]

    def header_for(self, field_name: str) -> Optional[str]:
        idx = self.columns.get(field_name)
        if idx is None:
            return None
        return self.headers[idx]

    def as_mapping(self) -> Dict[str, str]:
        return {name: self.headers[idx] for name, idx in self.columns.items()}


@dataclass(frozen=True)
class RawTable:
    """Decoded grid of raw cell values for one sheet or text file."""

    name: str
    rows: List[List[object]]


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one ingestion call.

    ``records`` is populated only for ``IngestStatus.OK``. ``resolved_headers``
    and ``sheet_names`` are diagnostics for callers (e.g. to report which
    headers were detected when nothing matched).
    """

    status: IngestStatus
    path: str
    records: Tuple[object, ...] = ()
    resolved_headers: Dict[str, Dict[str, str]] = field(default_factory=dict)
    sheet_names: Tuple[str, ...] = ()
    rejections: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is IngestStatus.OK

    @property
    def is_empty(self) -> bool:
        return self.status is IngestStatus.EMPTY

    @property
    def rejected_rows(self) -> int:
        return sum(self.rejections.values())


@dataclass(frozen=True)
class Aggregate:
    occupancy: float = 0.0
    average_rate: float = 0.0
    revenue: float = 0.0
    double_occupancy: float = 0.0
    revpar: float = 0.0
    persons: float = 0.0
    weight: float = 0.0
    days: int = 0


@dataclass(frozen=True)
class RankingEntry:
    label: str
    value: float
    share: float


@dataclass(frozen=True)
class DeltaResult:
    """Change of ``current`` against ``base``.

    ``change`` is a fraction for ``DeltaKind.RATIO`` and percentage points
    for ``DeltaKind.POINTS``. When ``no_base`` is set there is no comparable
    denominator and ``change`` is ``None``; it is never reported as zero.
    """

    current: float
    base: float
    change: Optional[float]
    no_base: bool
    kind: DeltaKind = DeltaKind.RATIO


@dataclass(frozen=True)
class PeriodComparison:
    current: Aggregate
    base: Aggregate
    deltas: Dict[str, DeltaResult]


@dataclass(frozen=True)
class MonthComparison:
    month: int
    label: str
    current: Aggregate
    base: Aggregate
    deltas: Dict[str, DeltaResult]


@dataclass(frozen=True)
class MonthlySeries:
    months: List[MonthComparison]
    incomplete_base: bool
    compared_months: Tuple[int, ...]
    current_total: Aggregate
    base_total: Aggregate


@dataclass(frozen=True)
class SliceItem:
    key: str
    label: str
    aggregate: Aggregate


@dataclass(frozen=True)
class PeriodRankingItem:
    key: str
    label: str
    value: float
    aggregate: Aggregate


@dataclass(frozen=True)
class GroupComparison:
    """Current vs base total for one label (tier, hotel)."""

    label: str
    current: int
    base: int
    share: float
    delta: DeltaResult


@dataclass(frozen=True)
class EliteMix:
    current_elite: int
    current_total: int
    current_share: float
    base_elite: int
    base_total: int
    base_share: Optional[float]
    delta: DeltaResult
