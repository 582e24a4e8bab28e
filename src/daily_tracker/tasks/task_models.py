# src/daily_tracker/tasks/task_models.py

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_raw(cls, raw: Any) -> Priority:
        """Lenient parse for stored data: unknown values degrade to MEDIUM."""
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    priority: Priority
    completed: bool
    created_at: str
    completed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "completed": self.completed,
            "createdAt": self.created_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        completed = raw.get("completed") is True
        completed_at = raw.get("completedAt")
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            description=str(raw.get("description") or ""),
            priority=Priority.from_raw(raw.get("priority")),
            completed=completed,
            created_at=str(raw.get("createdAt") or ""),
            completed_at=str(completed_at) if completed and completed_at else None,
        )

    def snapshot(self) -> Task:
        # All fields are immutable values, so a shallow copy is a full snapshot.
        return replace(self)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """
    Archive of one closed day. Never mutated once written.

    Entries read back from disk keep their stored JSON in `stored` and are
    written back exactly as found; the parsed fields are only a view for
    display. Entries created by rollover have no stored form yet.
    """

    date: str
    completed_tasks: tuple[Task, ...]
    total_tasks: int
    completed_count: int
    stored: Any = field(default=_UNSET, compare=False, repr=False)

    def to_dict(self) -> Any:
        if self.stored is not _UNSET:
            return copy.deepcopy(self.stored)
        return {
            "date": self.date,
            "completedTasks": [t.to_dict() for t in self.completed_tasks],
            "totalTasks": self.total_tasks,
            "completedCount": self.completed_count,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> HistoryEntry:
        if not isinstance(raw, dict):
            logger.warning("Keeping unrecognized history entry as-is: %r", raw)
            return cls(
                date="", completed_tasks=(), total_tasks=0, completed_count=0, stored=copy.deepcopy(raw)
            )

        items = raw.get("completedTasks")
        tasks = tuple(_parse_tasks(items if isinstance(items, list) else [], where="history"))
        return cls(
            date=str(raw.get("date") or ""),
            completed_tasks=tasks,
            total_tasks=_count(raw.get("totalTasks"), len(tasks)),
            completed_count=_count(raw.get("completedCount"), len(tasks)),
            stored=copy.deepcopy(raw),
        )


def _count(raw: Any, fallback: int) -> int:
    if isinstance(raw, bool):
        return fallback
    if isinstance(raw, int):
        return max(0, raw)
    try:
        return max(0, int(str(raw).strip()))
    except ValueError:
        return fallback


@dataclass(slots=True)
class TaskDocument:
    """
    The whole persisted state.

    last_reset is the day whose completion state is reflected in `tasks`.
    """

    last_reset: str
    tasks: list[Task] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)

    @classmethod
    def fresh(cls, today: date) -> TaskDocument:
        return cls(last_reset=today.isoformat())

    def find_index(self, task_id: str) -> int | None:
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                return i
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "lastReset": self.last_reset,
            "history": [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, raw: Any) -> TaskDocument:
        """
        Build a document from decoded JSON.

        Raises ValueError if the top-level shape is wrong; individual bad
        tasks are skipped with a warning.
        """
        if not isinstance(raw, dict):
            raise ValueError("task document must be a JSON object")

        raw_tasks = raw.get("tasks") or []
        raw_history = raw.get("history") or []
        if not isinstance(raw_tasks, list) or not isinstance(raw_history, list):
            raise ValueError("'tasks' and 'history' must be arrays")

        tasks: list[Task] = []
        seen: set[str] = set()
        for task in _parse_tasks(raw_tasks, where="tasks"):
            if task.id in seen:
                logger.warning("Duplicate task id=%s in stored document; keeping first.", task.id)
                continue
            seen.add(task.id)
            tasks.append(task)

        history = [HistoryEntry.from_dict(h) for h in raw_history]

        last_reset = raw.get("lastReset")
        if not isinstance(last_reset, str) or not last_reset.strip():
            # Unknown day: left empty so the next rollover check archives it.
            logger.warning("Stored document has no lastReset (%r); treating it as stale.", last_reset)
            last_reset = ""

        return cls(last_reset=last_reset.strip(), tasks=tasks, history=history)


def _parse_tasks(items: list[Any], *, where: str) -> list[Task]:
    out: list[Task] = []
    for raw in items:
        if not isinstance(raw, dict) or raw.get("id") in (None, "") or raw.get("title") is None:
            logger.warning("Skipping malformed task in %s: %r", where, raw)
            continue
        out.append(Task.from_dict(raw))
    return out


@dataclass(frozen=True, slots=True)
class TaskStats:
    """Read-only projection of the live task list; never stored."""

    today: str
    total_tasks: int
    completed_tasks: int

    @property
    def pending_tasks(self) -> int:
        return self.total_tasks - self.completed_tasks

    @property
    def completion_rate(self) -> int:
        if self.total_tasks <= 0:
            return 0
        # round-half-up of 100 * completed / total
        return (200 * self.completed_tasks + self.total_tasks) // (2 * self.total_tasks)

    @classmethod
    def of(cls, document: TaskDocument) -> TaskStats:
        return cls(
            today=document.last_reset,
            total_tasks=len(document.tasks),
            completed_tasks=sum(1 for t in document.tasks if t.completed),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today,
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "pendingTasks": self.pending_tasks,
            "completionRate": self.completion_rate,
        }


@dataclass(frozen=True, slots=True)
class TaskListing:
    tasks: list[Task]
    last_reset: str
    today: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "lastReset": self.last_reset,
            "today": self.today,
        }
