# src/daily_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the clock, the document store and the task service into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.state import AppState
from ..tasks.task_api import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.data_file.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    clock = SystemClock(settings.timezone)
    store = TaskStore(settings.data_file, on_corrupt=settings.on_corrupt, clock=clock)
    service = TaskService(store, clock)

    logger.info("Daily calendar anchored to timezone %s", clock.tz_name)
    return AppState(settings=settings, store=store, service=service)
