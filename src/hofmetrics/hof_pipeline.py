"""End-to-end report: ingest one source and summarise its KPIs.

``run_report`` is the programmatic entry point; ``main`` wraps it as the
``hofmetrics-report`` command and prints the summary as JSON.
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .common.config_validator import KpiFilter, PipelineConfig, load_config
from .ingestion.loader import SourceIngestor
from .kpis import membership, nationality, operations
from .kpis.filters import only
from .logging_utils import end_phase_timer, get_logger, log_error, log_system_event, start_phase_timer
from .models import (
    IngestResult,
    IngestStatus,
    MembershipRecord,
    NationalityRecord,
    OperationalDayRecord,
    RecordKind,
    SourceFormat,
)


LOGGER = logging.getLogger("hofmetrics.pipeline")


def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses, enums and dates into JSON-friendly values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def _ingest_summary(result: IngestResult) -> Dict[str, Any]:
    return {
        "status": result.status.value,
        "path": result.path,
        "records": len(result.records),
        "rejected_rows": result.rejected_rows,
        "rejections": dict(result.rejections),
        "resolved_headers": result.resolved_headers,
        "sheet_names": list(result.sheet_names),
        "error": result.error,
    }


def summarize_operational(records, flt: KpiFilter, rank_metric: str = "occupancy") -> Dict[str, Any]:
    rows = only(records, OperationalDayRecord)
    return {
        "years": operations.available_years(rows),
        "hotels": operations.detected_hotels(rows),
        "comparison": operations.compare_periods(rows, flt),
        "monthly": operations.monthly_series(rows, flt),
        "month_ranking": operations.month_ranking(rows, flt, metric=rank_metric),
        "weekday_ranking": operations.weekday_ranking(rows, flt, metric=rank_metric),
    }


def summarize_membership(records, flt: KpiFilter) -> Dict[str, Any]:
    rows = only(records, MembershipRecord)
    return {
        "years": operations.available_years(rows),
        "hotels": operations.detected_hotels(rows),
        "tier_ranking": membership.tier_ranking(rows, flt),
        "tiers": membership.tier_comparison(rows, flt),
        "elite_mix": membership.elite_mix(rows, flt),
        "by_hotel": membership.membership_by_hotel(rows, flt),
    }


def summarize_nationality(records, flt: KpiFilter) -> Dict[str, Any]:
    rows = only(records, NationalityRecord)
    return {
        "years": operations.available_years(rows),
        "total_guests": nationality.total_guests(rows, flt),
        "countries": nationality.country_ranking(rows, flt),
        "continents": nationality.continent_ranking(rows, flt),
    }


SUMMARIZERS = {
    RecordKind.OPERATIONAL_DAY: summarize_operational,
    RecordKind.MEMBERSHIP: summarize_membership,
    RecordKind.NATIONALITY: summarize_nationality,
}


async def run_report(
    path: str | Path,
    kind: RecordKind,
    flt: KpiFilter,
    ingestor: Optional[SourceIngestor] = None,
    source_format: Optional[SourceFormat] = None,
    sheet: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
    rank_metric: str = "occupancy",
) -> Dict[str, Any]:
    """Ingest ``path`` as ``kind`` and return a JSON-serialisable KPI summary.

    An unreadable or empty source yields a summary with ``kpis`` set to
    ``None`` and the ingestion status explaining why. ``rank_metric`` picks the
    aggregate field used by the month and weekday rankings.
    """

    logger = logger or LOGGER
    ingestor = ingestor or SourceIngestor()
    timings: Dict[str, float] = {}

    start = start_phase_timer("ingestion")
    result = await ingestor.ingest(path, kind, source_format=source_format, sheet=sheet)
    end_phase_timer("ingestion", start, timings, logger)

    report: Dict[str, Any] = {
        "kind": kind.value,
        "filter": flt.model_dump(mode="json"),
        "ingestion": _ingest_summary(result),
        "kpis": None,
    }
    if result.ok:
        start = start_phase_timer("aggregation")
        options = {"rank_metric": rank_metric} if kind is RecordKind.OPERATIONAL_DAY else {}
        report["kpis"] = SUMMARIZERS[kind](result.records, flt, **options)
        end_phase_timer("aggregation", start, timings, logger)
    report["timings"] = timings
    return to_jsonable(report)


def build_arg_parser() -> argparse.ArgumentParser:
    """Create an argument parser for the report CLI."""

    parser = argparse.ArgumentParser(description="Hotel operations KPI report")
    parser.add_argument("source", help="Path to a delimited text file or workbook")
    parser.add_argument("--kind", choices=[k.value for k in RecordKind], default=RecordKind.OPERATIONAL_DAY.value)
    parser.add_argument("--year", type=int, required=True, help="Target year")
    parser.add_argument("--base-year", type=int, help="Comparison year (default: year - 1)")
    parser.add_argument("--hotel", default="all", help="Canonical hotel, group alias (JCR) or 'all'")
    parser.add_argument("--hof", choices=["History", "Forecast", "All"], default="All")
    parser.add_argument("--month", type=int, default=0, help="1-12, 0 = all")
    parser.add_argument("--quarter", type=int, default=0, help="1-4, 0 = all")
    parser.add_argument("--rank-metric", choices=list(operations.KPI_FIELDS), default="occupancy", help="Metric for month and weekday rankings")
    parser.add_argument("--sheet", help="Only read this workbook sheet")
    parser.add_argument("--format", choices=[f.value for f in SourceFormat], help="Override extension-based detection")
    parser.add_argument("--config", default="config/pipeline.yaml", help="Path to configuration file")
    return parser


def main() -> None:
    """CLI entry point for ``hofmetrics-report``."""

    args = build_arg_parser().parse_args()
    config: PipelineConfig = load_config(args.config)
    logger = get_logger(level=config.logging.level, logs_dir=config.logging.logs_dir)
    flt = KpiFilter(
        year=args.year,
        base_year=args.base_year,
        hotel=args.hotel,
        hof=args.hof,
        month=args.month,
        quarter=args.quarter,
    )
    log_system_event(logger, "Report for %s (%s) year %d vs %d", args.source, args.kind, flt.year, flt.base_year)
    ingestor = SourceIngestor(settings=config.ingestion)
    report = asyncio.run(
        run_report(
            args.source,
            RecordKind(args.kind),
            flt,
            ingestor=ingestor,
            source_format=SourceFormat(args.format) if args.format else None,
            sheet=args.sheet,
            logger=logger,
            rank_metric=args.rank_metric,
        )
    )
    print(json.dumps(report, ensure_ascii=False, indent=2))
    if report["ingestion"]["status"] == IngestStatus.UNREADABLE.value:
        log_error(logger, "Could not load source %s: %s", args.source, report["ingestion"]["error"])
        raise SystemExit(2)


if __name__ == "__main__":  # pragma: no cover - CLI guard
    main()
