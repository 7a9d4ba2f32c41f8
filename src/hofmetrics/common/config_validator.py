"""Configuration and filter validation models using Pydantic."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import HofMode, RecordKind


HOTEL_GROUPS: Dict[str, tuple[str, ...]] = {
    "JCR": ("MARRIOTT", "SHERATON BCR", "SHERATON MDQ"),
}
ALL_HOTELS = "ALL"


class KpiFilter(BaseModel):
    """Filter parameters accepted by every aggregation call."""

    year: int = Field(..., ge=1900, le=2200, description="Target year")
    base_year: Optional[int] = Field(None, ge=1900, le=2200, description="Comparison year (defaults to year - 1)")
    hotel: str = Field(ALL_HOTELS, validate_default=True, description="Canonical hotel id, 'all', or a hotel group alias")
    hof: HofMode = Field(HofMode.ALL, description="History / Forecast / All")
    month: int = Field(0, ge=0, le=12, description="1-12, 0 = all months")
    quarter: int = Field(0, ge=0, le=4, description="1-4, 0 = all quarters")

    @field_validator("hotel")
    @classmethod
    def normalize_hotel(cls, v: str) -> str:
        s = " ".join(str(v or "").split()).upper()
        return s or ALL_HOTELS

    @model_validator(mode="after")
    def default_base_year(self):
        if self.base_year is None:
            self.base_year = self.year - 1
        return self

    def hotel_set(self) -> Optional[frozenset[str]]:
        """Hotels admitted by the filter, or None when every hotel passes."""
        if self.hotel == ALL_HOTELS:
            return None
        if self.hotel in HOTEL_GROUPS:
            return frozenset(HOTEL_GROUPS[self.hotel])
        return frozenset({self.hotel})

    def for_year(self, year: int) -> "KpiFilter":
        return self.model_copy(update={"year": year})


class IngestionSettings(BaseModel):
    """Header detection and parsing knobs."""

    header_scan_rows: int = Field(12, ge=1, description="Rows scanned for the header row")
    header_min_filled: int = Field(3, ge=1, description="Non-blank cells required in the header row")
    serial_date_threshold: float = Field(1000, ge=0, description="Numbers above this are spreadsheet serial dates")
    column_aliases: Dict[RecordKind, Dict[str, List[str]]] = Field(
        default_factory=dict,
        description="Extra header synonyms per record kind and canonical field",
    )


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    logs_dir: Optional[str] = None


class PipelineConfig(BaseModel):
    """Complete pipeline configuration."""

    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config(path: str | Path | None) -> PipelineConfig:
    """Load and validate a YAML configuration file.

    A missing or empty file yields the defaults.
    """
    if path is None or not Path(path).exists():
        return PipelineConfig()
    with open(path, "r", encoding="utf-8") as stream:
        raw = yaml.safe_load(stream) or {}
    return PipelineConfig.model_validate(raw)
