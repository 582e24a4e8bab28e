# src/daily_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_api import TaskService
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in connectors.
    settings: Any

    store: TaskStore
    service: TaskService
