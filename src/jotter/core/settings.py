"""Settings loader for Jotter."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_timeout_s: float
    alert_timeout_s: float
    log_level: str


def load_settings() -> Settings:
    load_dotenv(find_dotenv(usecwd=True))
    data_dir = Path(os.environ.get("JOTTER_DATA_DIR", "~/.jotter")).expanduser()
    db_timeout_s = _parse_float(
        os.environ.get("JOTTER_DB_TIMEOUT_S", "5"), "JOTTER_DB_TIMEOUT_S"
    )
    if db_timeout_s < 0:
        raise ValueError("JOTTER_DB_TIMEOUT_S must not be negative")
    alert_timeout_s = _parse_float(
        os.environ.get("JOTTER_ALERT_TIMEOUT_S", "3"), "JOTTER_ALERT_TIMEOUT_S"
    )
    log_level = _parse_log_level(os.environ.get("JOTTER_LOG_LEVEL", "WARNING"))

    return Settings(
        data_dir=data_dir,
        db_timeout_s=db_timeout_s,
        alert_timeout_s=alert_timeout_s,
        log_level=log_level,
    )


def _parse_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Invalid float for {name}: {value}") from exc


def _parse_log_level(value: str) -> str:
    normalized = value.strip().upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}")
    return normalized
