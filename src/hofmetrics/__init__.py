"""hofmetrics: hotel-operations KPI pipeline (ingestion, normalization, aggregation)."""

__version__ = "0.3.0"
