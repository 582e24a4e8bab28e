# tests/test_task_models.py

from __future__ import annotations

import pytest

from daily_tracker.tasks.task_models import Priority, TaskDocument, TaskStats


def test_stats_zero_tasks_has_zero_rate() -> None:
    stats = TaskStats(today="2024-01-01", total_tasks=0, completed_tasks=0)
    assert stats.completion_rate == 0
    assert stats.pending_tasks == 0


@pytest.mark.parametrize(
    ("total", "completed", "rate"),
    [(4, 3, 75), (3, 1, 33), (3, 2, 67), (8, 1, 13), (2, 2, 100)],
)
def test_stats_completion_rate_rounds_half_up(total: int, completed: int, rate: int) -> None:
    stats = TaskStats(today="2024-01-01", total_tasks=total, completed_tasks=completed)
    assert stats.completion_rate == rate
    assert stats.to_dict() == {
        "today": "2024-01-01",
        "totalTasks": total,
        "completedTasks": completed,
        "pendingTasks": total - completed,
        "completionRate": rate,
    }


def test_document_from_dict_reads_wire_format() -> None:
    raw = {
        "tasks": [
            {
                "id": "1700000000000",
                "title": "Stretch",
                "description": "",
                "priority": "high",
                "completed": True,
                "createdAt": "2024-01-01T07:00:00.000Z",
                "completedAt": "2024-01-01T07:30:00.000Z",
            }
        ],
        "lastReset": "2024-01-01",
        "history": [
            {
                "date": "2023-12-31",
                "completedTasks": [
                    {"id": "9", "title": "Old", "completed": True, "completedAt": "2023-12-31T10:00:00.000Z"}
                ],
                "totalTasks": 3,
                "completedCount": 1,
            }
        ],
    }

    doc = TaskDocument.from_dict(raw)

    assert doc.last_reset == "2024-01-01"
    assert doc.tasks[0].priority is Priority.HIGH
    assert doc.tasks[0].completed_at == "2024-01-01T07:30:00.000Z"
    assert doc.history[0].total_tasks == 3
    assert doc.history[0].completed_tasks[0].title == "Old"
    assert doc.to_dict()["tasks"][0] == raw["tasks"][0]


def test_document_from_dict_skips_bad_and_duplicate_tasks() -> None:
    raw = {
        "tasks": [
            {"id": "a", "title": "first", "priority": "urgent"},
            {"id": "a", "title": "duplicate"},
            {"title": "no id"},
            "not a task",
        ],
    }

    doc = TaskDocument.from_dict(raw)

    assert [t.title for t in doc.tasks] == ["first"]
    assert doc.tasks[0].priority is Priority.MEDIUM
    assert doc.last_reset == ""
    assert doc.history == []


def test_document_from_dict_rejects_wrong_shape() -> None:
    with pytest.raises(ValueError):
        TaskDocument.from_dict([])
    with pytest.raises(ValueError):
        TaskDocument.from_dict({"tasks": {}})


def test_stored_history_is_written_back_unchanged() -> None:
    entry = {
        "date": "2023-12-31",
        "completedTasks": [
            {"id": "9", "title": "Old", "priority": "urgent", "tag": "a", "completed": True},
            {"id": "10", "completed": True},
        ],
        "totalTasks": 5,
        "completedCount": 2,
        "note": "imported",
    }
    raw = {"tasks": [], "lastReset": "2024-01-01", "history": [entry, "legacy"]}

    doc = TaskDocument.from_dict(raw)

    assert doc.to_dict()["history"] == [entry, "legacy"]
    assert [t.title for t in doc.history[0].completed_tasks] == ["Old"]
    assert doc.history[0].completed_count == 2


@pytest.mark.parametrize("bad", [None, "lots", True, [1]])
def test_history_bad_counts_fall_back_to_task_count(bad) -> None:
    entry = {
        "date": "2023-12-31",
        "completedTasks": [{"id": "9", "title": "Old", "completed": True}],
        "totalTasks": bad,
        "completedCount": bad,
    }

    doc = TaskDocument.from_dict({"tasks": [], "lastReset": "2024-01-01", "history": [entry]})

    assert doc.history[0].total_tasks == 1
    assert doc.history[0].completed_count == 1
    assert doc.to_dict()["history"] == [entry]


def test_completed_must_be_a_real_boolean() -> None:
    raw = {
        "tasks": [
            {"id": "a", "title": "string false", "completed": "false", "completedAt": "2024-01-01T07:00:00.000Z"},
            {"id": "b", "title": "one", "completed": 1},
            {"id": "c", "title": "done", "completed": True, "completedAt": "2024-01-01T07:00:00.000Z"},
        ],
        "lastReset": "2024-01-01",
    }

    doc = TaskDocument.from_dict(raw)

    assert [t.completed for t in doc.tasks] == [False, False, True]
    assert doc.tasks[0].completed_at is None
