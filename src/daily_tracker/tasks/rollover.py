# src/daily_tracker/tasks/rollover.py

"""
Daily rollover.

Pure decision logic: no I/O here. The caller loads the document, calls
evaluate_and_apply(), and persists it when a reset was performed.

Rollover is lazy: it is evaluated on access (and optionally by the periodic
scheduler), never by a timer of its own. Any gap since lastReset, one day or
many, produces at most one history entry: the one for lastReset itself.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from .task_models import HistoryEntry, TaskDocument

logger = logging.getLogger(__name__)


def _parse_day(raw: str) -> date | None:
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        return None


def is_reset_due(document: TaskDocument, today: date) -> bool:
    last = _parse_day(document.last_reset)
    if last is None:
        logger.warning("Unparseable lastReset=%r; treating it as stale.", document.last_reset)
        return True
    if last > today:
        # Clock moved backwards; closing lastReset again would archive a day twice.
        logger.warning(
            "lastReset=%s is after today=%s; skipping rollover.", document.last_reset, today
        )
        return False
    return last < today


def evaluate_and_apply(document: TaskDocument, today: date) -> bool:
    """
    Apply the at-most-once-per-day transition in place.

    Returns True if a reset was performed (caller must save), False otherwise
    (the document is left untouched).
    """
    if not is_reset_due(document, today):
        return False

    # A missing day is closed as yesterday; any other stored value is kept verbatim.
    closed_day = document.last_reset or (today - timedelta(days=1)).isoformat()
    logger.info("Performing daily reset: %s -> %s", closed_day, today.isoformat())

    completed = [t for t in document.tasks if t.completed]
    if completed:
        entry = HistoryEntry(
            date=closed_day,
            completed_tasks=tuple(t.snapshot() for t in completed),
            total_tasks=len(document.tasks),
            completed_count=len(completed),
        )
        document.history.append(entry)
        logger.info(
            "Archived %d/%d completed tasks for %s", entry.completed_count, entry.total_tasks, closed_day
        )

    for task in document.tasks:
        task.completed = False
        task.completed_at = None

    document.last_reset = today.isoformat()
    return True
