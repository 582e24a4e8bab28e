# src/daily_tracker/core/errors.py

"""
Error taxonomy shared by the service and the connectors.

Connectors translate these into their own surface (HTTP status codes,
console messages). Nothing here is fatal to the process.
"""

from __future__ import annotations

from pathlib import Path


class TrackerError(Exception):
    """Base class for all expected, caller-facing failures."""


class ValidationError(TrackerError):
    """Bad task input; raised before any load or save happens."""


class NotFoundError(TrackerError):
    def __init__(self, task_id: str) -> None:
        super().__init__("Task not found")
        self.task_id = task_id


class PersistenceError(TrackerError):
    """The task document could not be read or written."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class CorruptDocumentError(PersistenceError):
    """Stored document exists but cannot be parsed (only raised under the 'fail' policy)."""
