"""In-memory store of parsed record sets, keyed by source path.

The cache is an explicit object owned by whoever builds the ingestor; there
is no module-level instance. It holds at most one record set per path: the
entry remembers which kind and sheet it was parsed as, a lookup asking for
anything else is a miss, and every write replaces the path's entry
wholesale (last write wins).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from ..models import IngestResult, RecordKind


LOGGER = logging.getLogger("hofmetrics.ingestion.cache")


@dataclass(frozen=True)
class CacheKey:
    path: str
    kind: RecordKind
    sheet: Optional[str] = None


class RecordCache:
    """Path-keyed memo of ``IngestResult`` objects."""

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[CacheKey, IngestResult]] = {}

    def get(self, key: CacheKey) -> Optional[IngestResult]:
        entry = self._entries.get(key.path)
        if entry is None or entry[0] != key:
            return None
        return entry[1]

    def set(self, key: CacheKey, result: IngestResult) -> None:
        previous = self._entries.get(key.path)
        if previous is not None and previous[0] != key:
            LOGGER.debug("Replacing cached %s entry for %s", previous[0].kind.value, key.path)
        self._entries[key.path] = (key, result)

    def invalidate(self, path: str) -> int:
        """Drop the entry parsed from ``path``; returns how many were removed (0 or 1)."""
        if self._entries.pop(path, None) is None:
            return 0
        LOGGER.info("Invalidated cached entry for %s", path)
        return 1

    def clear(self) -> None:
        self._entries.clear()

    def paths(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, CacheKey):
            return False
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
