"""Errors raised at the file boundary of the ingestion pipeline."""
from __future__ import annotations


class SourceUnreadableError(Exception):
    """The source bytes could not be fetched or decoded.

    Carries the source ``path`` so callers can report which file failed.
    Never retried by the pipeline.
    """

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not read source {self.path}: {reason}")
