"""Asynchronous ingestion: fetch bytes, decode, resolve, build records, cache.

Each ``ingest`` call suspends only while fetching the source bytes; parsing
and record building run synchronously afterwards. A ``still_relevant``
callback is consulted once the bytes arrive and again before the result is
cached, so a superseded load is dropped without touching the cache.
"""
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from ..common.config_validator import IngestionSettings
from ..exceptions import SourceUnreadableError
from ..logging_utils import log_system_event, log_warning
from ..models import IngestResult, IngestStatus, RawTable, RecordKind, RowRejection, SourceFormat
from ..standards.fields import schema_for
from .cache import CacheKey, RecordCache
from .header_resolver import data_rows, resolve_headers
from .readers import detect_source_format, read_tables
from .records import REASON_INVALID_ROW, build_record


LOGGER = logging.getLogger("hofmetrics.ingestion.loader")

Fetcher = Callable[[str], Awaitable[bytes]]
RelevanceCheck = Callable[[], bool]


async def read_file_bytes(path: str) -> bytes:
    """Default fetcher: read a local file off the event loop."""
    try:
        return await asyncio.to_thread(Path(path).read_bytes)
    except OSError as exc:
        raise SourceUnreadableError(path, exc.strerror or str(exc)) from exc


class SourceIngestor:
    """Turns source files into typed record sets, memoized per path."""

    def __init__(
        self,
        cache: Optional[RecordCache] = None,
        fetcher: Optional[Fetcher] = None,
        settings: Optional[IngestionSettings] = None,
    ) -> None:
        self.cache = cache if cache is not None else RecordCache()
        self.fetcher = fetcher or read_file_bytes
        self.settings = settings or IngestionSettings()

    def invalidate(self, path: str | Path) -> int:
        return self.cache.invalidate(str(path))

    async def reload(self, path: str | Path, kind: RecordKind, **kwargs) -> IngestResult:
        """Drop cached entries for ``path`` and parse it again."""
        self.invalidate(path)
        return await self.ingest(path, kind, **kwargs)

    async def ingest(
        self,
        path: str | Path,
        kind: RecordKind,
        source_format: Optional[SourceFormat] = None,
        sheet: Optional[str] = None,
        still_relevant: Optional[RelevanceCheck] = None,
    ) -> IngestResult:
        path = str(path)
        key = CacheKey(path, kind, sheet)
        cached = self.cache.get(key)
        if cached is not None:
            LOGGER.debug("Cache hit for %s (%s)", path, kind.value)
            return cached
        LOGGER.debug("Cache miss for %s (%s)", path, kind.value)

        try:
            fmt = source_format or detect_source_format(path)
            data = await self.fetcher(path)
            if _superseded(still_relevant):
                return self._discarded(path)
            tables, sheet_names = read_tables(data, fmt, path, sheet=sheet)
        except SourceUnreadableError as exc:
            log_warning(LOGGER, "Source unreadable: %s", exc)
            return IngestResult(status=IngestStatus.UNREADABLE, path=path, error=str(exc))

        result = self.parse_tables(path, kind, tables, sheet_names)
        if _superseded(still_relevant):
            return self._discarded(path)
        self.cache.set(key, result)
        return result

    def parse_tables(self, path: str, kind: RecordKind, tables: List[RawTable], sheet_names: List[str]) -> IngestResult:
        """Resolve and build records for every decoded table, in order."""

        schema = schema_for(kind, self.settings.column_aliases.get(kind))
        records: List[object] = []
        resolved: Dict[str, Dict[str, str]] = {}
        rejections: Counter = Counter()

        for table in tables:
            resolution = resolve_headers(
                table.rows,
                schema,
                scan_rows=self.settings.header_scan_rows,
                min_filled=self.settings.header_min_filled,
                table=table.name,
            )
            resolved[table.name] = resolution.as_mapping()
            missing = [name for name in schema.required if name not in resolution.columns]
            if missing:
                log_warning(LOGGER, "Table %r in %s lacks required columns %s; headers were %s", table.name, path, missing, list(resolution.headers))

            accepted = 0
            for offset, row in enumerate(data_rows(table.rows, resolution), start=resolution.header_index + 2):
                try:
                    outcome = build_record(kind, row, resolution, offset, table.name, self.settings.serial_date_threshold)
                except (TypeError, ValueError) as exc:
                    log_warning(LOGGER, "Row %d of table %r in %s could not be built: %s", offset, table.name, path, exc)
                    outcome = RowRejection(offset, REASON_INVALID_ROW, table.name)
                if isinstance(outcome, RowRejection):
                    rejections[outcome.reason] += 1
                    continue
                records.append(outcome)
                accepted += 1
            LOGGER.info("Table %r in %s: %d %s records accepted", table.name, path, accepted, kind.value)

        if rejections:
            LOGGER.info("Rows rejected in %s: %s", path, dict(rejections))
        status = IngestStatus.OK if records else IngestStatus.EMPTY
        if status is IngestStatus.EMPTY:
            log_warning(LOGGER, "No usable %s rows in %s", kind.value, path)
        else:
            log_system_event(LOGGER, "Ingested %d %s records from %s", len(records), kind.value, path)
        return IngestResult(
            status=status,
            path=path,
            records=tuple(records),
            resolved_headers=resolved,
            sheet_names=tuple(sheet_names),
            rejections=dict(rejections),
        )

    def _discarded(self, path: str) -> IngestResult:
        LOGGER.info("Discarding superseded load of %s", path)
        return IngestResult(status=IngestStatus.DISCARDED, path=path)


def _superseded(still_relevant: Optional[RelevanceCheck]) -> bool:
    return still_relevant is not None and not still_relevant()
