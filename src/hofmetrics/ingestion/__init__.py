"""
Ingestion: decode source files, resolve headers, normalize values and
build typed records, memoized per source path.
"""

from .cache import CacheKey, RecordCache
from .loader import SourceIngestor, read_file_bytes

__all__ = ["CacheKey", "RecordCache", "SourceIngestor", "read_file_bytes"]
