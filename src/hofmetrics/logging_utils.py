"""Unified logging utilities for hofmetrics.

Centralizes logger setup and timing helpers so ingestion and reporting emit:
  - system-readable logs on the console (and optionally system.log)
  - per-phase timings for ingestion and aggregation

Design constraints:
  - No imports of pipeline modules to avoid circular dependencies.
  - Graceful degradation: if a file handler fails, keep console logging.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, Optional


SYSTEM_FMT = "[%(asctime)s] [%(levelname)s] %(name)s | %(message)s"
ROOT_LOGGER = "hofmetrics"


def _ensure_logs_dir(logs_dir: str | Path) -> Path:
    path = Path(logs_dir).expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_add_file_handler(logger: logging.Logger, path: Path, fmt: str, level: int) -> None:
    try:
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(fmt))
        logger.addHandler(fh)
    except OSError as exc:  # pragma: no cover - filesystem specific
        logger.warning("[WARNING] Failed to attach file handler %s (%s)", str(path), exc)


def get_logger(name: str = ROOT_LOGGER, level: str | int = "INFO", logs_dir: Optional[str | Path] = None) -> logging.Logger:
    """Return a logger with a console handler and an optional system.log file.

    Handlers are reset on every call so repeated initialisation does not
    duplicate output.
    """
    logger = logging.getLogger(name)
    resolved_level = logging.getLevelName(level) if isinstance(level, str) else level
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO
    logger.setLevel(resolved_level)
    logger.handlers = []

    sh = logging.StreamHandler()
    sh.setLevel(resolved_level)
    sh.setFormatter(logging.Formatter(SYSTEM_FMT))
    logger.addHandler(sh)

    if logs_dir:
        _safe_add_file_handler(logger, _ensure_logs_dir(logs_dir) / "system.log", SYSTEM_FMT, resolved_level)
    return logger


def start_phase_timer(phase_name: str) -> float:
    """Start a timer for a given phase and return the perf counter."""
    return time.perf_counter()


def end_phase_timer(phase_name: str, start_time: float, timing_dict: Dict[str, float], logger: logging.Logger) -> float:
    """End timer, record it in ``timing_dict`` and log the duration."""
    elapsed = time.perf_counter() - float(start_time)
    timing_dict[phase_name] = float(elapsed)
    logger.info("Phase %s completed in %.3f seconds", phase_name, elapsed)
    return elapsed


def log_system_event(logger: logging.Logger, message: str, *args: object) -> None:
    logger.info("[SYSTEM] " + message, *args)


def log_warning(logger: logging.Logger, message: str, *args: object) -> None:
    logger.warning("[WARNING] " + message, *args)


def log_error(logger: logging.Logger, message: str, *args: object) -> None:
    logger.error("[ERROR] " + message, *args)
