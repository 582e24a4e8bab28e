# src/daily_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the service.

The service depends on Protocols instead of concrete implementations.
This keeps storage and time swappable and makes testing easier.
"""

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Protocol


class Clock(Protocol):
    """Source of "today" (reference-zone calendar date) and timestamps."""
    def today(self) -> date: ...
    def now_iso(self) -> str: ...


class DocumentRepo(Protocol):
    """
    Store-side port: durable load/save of the whole task document.

    locked() must be held for the full load-mutate-save cycle of one request.
    """

    def load(self) -> Any: ...  # TaskDocument (kept as Any to avoid import coupling)
    def save(self, document: Any) -> None: ...
    def locked(self) -> AbstractContextManager[Any]: ...
