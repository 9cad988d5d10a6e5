"""Compose settings, logging and the TUI."""

from __future__ import annotations

import logging

from jotter.app.tui import run_tui
from jotter.core.settings import load_settings


def run_app() -> None:
    settings = load_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=settings.log_level,
        filename=settings.data_dir / "jotter.log",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_tui(settings)
