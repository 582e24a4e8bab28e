# src/daily_tracker/tasks/task_api.py

from __future__ import annotations

"""
Task operations used by every connector (HTTP, console, scheduler).

Each public method is one request: it takes the store lock, loads the
document, applies the daily rollover (saving if it reset), then does its own
work against the now-current document.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from ..core.errors import NotFoundError, ValidationError
from ..core.ports import Clock, DocumentRepo
from .rollover import evaluate_and_apply
from .task_models import HistoryEntry, Priority, Task, TaskDocument, TaskListing, TaskStats

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("completed", "title", "description", "priority")


def _clean_title(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Task title is required")
    return raw.strip()


def _clean_description(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise ValidationError("Task description must be a string")
    return raw.strip()


def _clean_priority(raw: Any) -> Priority:
    if raw is None:
        return Priority.MEDIUM
    try:
        return Priority(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Priority must be one of: {allowed}") from None


class TaskService:
    def __init__(self, store: DocumentRepo, clock: Clock) -> None:
        self._store = store
        self._clock = clock

    # ---- helpers (call with the store lock held) ----

    def _load_current(self) -> tuple[TaskDocument, bool]:
        document = self._store.load()
        reset = evaluate_and_apply(document, self._clock.today())
        if reset:
            self._store.save(document)
        return document, reset

    def _new_id(self, document: TaskDocument) -> str:
        existing = {t.id for t in document.tasks}
        while True:
            candidate = uuid.uuid4().hex
            if candidate not in existing:
                return candidate

    def _require(self, document: TaskDocument, task_id: str) -> int:
        idx = document.find_index(str(task_id))
        if idx is None:
            raise NotFoundError(str(task_id))
        return idx

    # ---- public API ----

    def check_rollover(self) -> bool:
        """Evaluate-and-apply the daily reset. Safe to call arbitrarily often."""
        with self._store.locked():
            _, reset = self._load_current()
            return reset

    def list_tasks(self) -> TaskListing:
        with self._store.locked():
            document, _ = self._load_current()
            return TaskListing(
                tasks=list(document.tasks),
                last_reset=document.last_reset,
                today=self._clock.today().isoformat(),
            )

    def create_task(
        self,
        title: Any,
        description: Any = None,
        priority: Any = None,
    ) -> Task:
        # Validate before touching the store: a rejected request persists nothing.
        clean_title = _clean_title(title)
        clean_description = _clean_description(description)
        clean_priority = _clean_priority(priority)

        with self._store.locked():
            document, _ = self._load_current()
            task = Task(
                id=self._new_id(document),
                title=clean_title,
                description=clean_description,
                priority=clean_priority,
                completed=False,
                created_at=self._clock.now_iso(),
                completed_at=None,
            )
            document.tasks.append(task)
            self._store.save(document)

        logger.info("Task created id=%s priority=%s", task.id, task.priority.value)
        return task

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> Task:
        """
        Apply only the keys present in `changes` (completed/title/description/priority).

        completed=True on an incomplete task stamps completedAt; completed=False clears it.
        """
        present = {k: changes[k] for k in UPDATABLE_FIELDS if k in changes}

        if "completed" in present and not isinstance(present["completed"], bool):
            raise ValidationError("'completed' must be a boolean")
        if "title" in present:
            present["title"] = _clean_title(present["title"])
        if "description" in present:
            present["description"] = _clean_description(present["description"])
        if "priority" in present:
            present["priority"] = _clean_priority(present["priority"])

        with self._store.locked():
            document, _ = self._load_current()
            task = document.tasks[self._require(document, task_id)]

            if "completed" in present:
                done = present["completed"]
                if done and not task.completed:
                    task.completed_at = self._clock.now_iso()
                elif not done:
                    task.completed_at = None
                task.completed = done
            if "title" in present:
                task.title = present["title"]
            if "description" in present:
                task.description = present["description"]
            if "priority" in present:
                task.priority = present["priority"]

            self._store.save(document)

        logger.info("Task updated id=%s fields=%s", task.id, ",".join(present) or "-")
        return task

    def delete_task(self, task_id: str) -> Task:
        with self._store.locked():
            document, _ = self._load_current()
            removed = document.tasks.pop(self._require(document, task_id))
            self._store.save(document)

        logger.info("Task deleted id=%s", removed.id)
        return removed

    def get_history(self) -> list[HistoryEntry]:
        with self._store.locked():
            document, _ = self._load_current()
            return list(document.history)

    def get_stats(self) -> TaskStats:
        with self._store.locked():
            document, _ = self._load_current()
            return TaskStats.of(document)
