# tests/test_task_api.py

from __future__ import annotations

import json
import threading
from datetime import date

import pytest

from daily_tracker.core.errors import NotFoundError, PersistenceError, ValidationError
from daily_tracker.tasks.task_api import TaskService


def test_create_task_defaults_and_unique_ids(service: TaskService) -> None:
    a = service.create_task("  Water plants  ")
    b = service.create_task("Walk", description=" 30 min ", priority="high")

    assert a.id != b.id
    assert a.title == "Water plants"
    assert a.description == ""
    assert a.priority.value == "medium"
    assert a.completed is False and a.completed_at is None
    assert a.created_at
    assert b.description == "30 min"
    assert b.priority.value == "high"
    assert [t.id for t in service.list_tasks().tasks] == [a.id, b.id]


@pytest.mark.parametrize("title", [None, "", "   ", 42])
def test_create_task_rejects_bad_title_without_writing(service: TaskService, store, title) -> None:
    before = store.path.read_text("utf-8")

    with pytest.raises(ValidationError):
        service.create_task(title)

    assert store.path.read_text("utf-8") == before


def test_create_task_rejects_unknown_priority(service: TaskService) -> None:
    with pytest.raises(ValidationError):
        service.create_task("Plan", priority="urgent")


def test_update_completion_sets_and_clears_timestamp(service: TaskService) -> None:
    task = service.create_task("Meditate")

    done = service.update_task(task.id, {"completed": True})
    assert done.completed is True
    stamped = done.completed_at
    assert stamped is not None

    again = service.update_task(task.id, {"completed": True})
    assert again.completed_at == stamped

    undone = service.update_task(task.id, {"completed": False})
    assert undone.completed is False
    assert undone.completed_at is None


def test_update_applies_only_present_fields(service: TaskService) -> None:
    task = service.create_task("Draft", description="notes", priority="low")

    updated = service.update_task(task.id, {"title": " Final ", "unknown": "ignored"})

    assert updated.title == "Final"
    assert updated.description == "notes"
    assert updated.priority.value == "low"
    assert updated.created_at == task.created_at


def test_update_validation(service: TaskService) -> None:
    task = service.create_task("Draft")
    with pytest.raises(ValidationError):
        service.update_task(task.id, {"completed": "yes"})
    with pytest.raises(ValidationError):
        service.update_task(task.id, {"title": "  "})
    with pytest.raises(ValidationError):
        service.update_task(task.id, {"priority": "critical"})


def test_update_and_delete_unknown_id(service: TaskService) -> None:
    service.create_task("Keep")
    with pytest.raises(NotFoundError):
        service.update_task("missing", {"completed": True})
    with pytest.raises(NotFoundError):
        service.delete_task("missing")
    assert len(service.list_tasks().tasks) == 1


def test_delete_removes_only_target(service: TaskService) -> None:
    a = service.create_task("A")
    b = service.create_task("B", priority="high")
    c = service.create_task("C")
    service.update_task(c.id, {"completed": True})
    before = {t.id: t.to_dict() for t in service.list_tasks().tasks}

    removed = service.delete_task(b.id)

    remaining = service.list_tasks().tasks
    assert removed.id == b.id
    assert [t.id for t in remaining] == [a.id, c.id]
    assert [t.to_dict() for t in remaining] == [before[a.id], before[c.id]]


def test_listing_triggers_rollover_after_date_change(service: TaskService, clock) -> None:
    a = service.create_task("A")
    service.create_task("B")
    service.update_task(a.id, {"completed": True})

    clock.current = date(2024, 1, 2)
    listing = service.list_tasks()

    assert listing.last_reset == "2024-01-02"
    assert listing.today == "2024-01-02"
    assert all(not t.completed for t in listing.tasks)
    history = service.get_history()
    assert len(history) == 1
    assert history[0].date == "2024-01-01"
    assert history[0].total_tasks == 2
    assert history[0].completed_count == 1
    assert [t.id for t in history[0].completed_tasks] == [a.id]


def test_mutation_on_new_day_sees_reset_state(service: TaskService, clock) -> None:
    a = service.create_task("A")
    service.update_task(a.id, {"completed": True})

    clock.current = date(2024, 1, 2)
    updated = service.update_task(a.id, {"title": "A2"})

    assert updated.completed is False
    assert service.get_stats().completed_tasks == 0


def test_check_rollover_is_idempotent(service: TaskService, store, clock) -> None:
    a = service.create_task("A")
    service.update_task(a.id, {"completed": True})
    clock.current = date(2024, 1, 2)

    assert service.check_rollover() is True
    snapshot = store.path.read_text("utf-8")
    assert service.check_rollover() is False
    assert store.path.read_text("utf-8") == snapshot


def test_history_count_never_decreases(service: TaskService, clock) -> None:
    counts = []
    for day in range(1, 5):
        clock.current = date(2024, 1, day)
        task = service.create_task(f"day {day}")
        service.update_task(task.id, {"completed": True})
        if day == 3:
            service.delete_task(task.id)
        counts.append(len(service.get_history()))

    assert counts == sorted(counts)
    assert [h.date for h in service.get_history()] == ["2024-01-01", "2024-01-02"]


def test_stats(service: TaskService) -> None:
    assert service.get_stats().to_dict()["completionRate"] == 0

    ids = [service.create_task(f"t{i}").id for i in range(4)]
    for task_id in ids[:3]:
        service.update_task(task_id, {"completed": True})

    stats = service.get_stats()
    assert stats.today == "2024-01-01"
    assert stats.total_tasks == 4
    assert stats.completed_tasks == 3
    assert stats.pending_tasks == 1
    assert stats.completion_rate == 75


def test_save_failure_propagates_and_nothing_persists(service: TaskService, store, monkeypatch) -> None:
    service.create_task("Existing")

    def broken_save(document) -> None:
        raise PersistenceError("disk full")

    monkeypatch.setattr(store, "save", broken_save)
    with pytest.raises(PersistenceError):
        service.create_task("Lost")
    monkeypatch.undo()

    assert [t.title for t in service.list_tasks().tasks] == ["Existing"]


def _seed(store, document: dict) -> None:
    store.path.write_text(json.dumps(document), "utf-8")


def test_stored_history_survives_load_and_save(service: TaskService, store) -> None:
    history = [
        {
            "date": "2023-12-31",
            "completedTasks": [{"id": "9", "title": "Old", "priority": "urgent", "tag": "a", "completed": True}],
            "totalTasks": 3,
            "completedCount": 1,
        }
    ]
    _seed(store, {"tasks": [], "lastReset": "2024-01-01", "history": history})

    service.create_task("new")

    assert [h.to_dict() for h in service.get_history()] == history
    assert json.loads(store.path.read_text("utf-8"))["history"] == history


def test_bad_history_counts_do_not_discard_document(service: TaskService, store) -> None:
    keep = {"id": "k", "title": "keep me", "completed": False, "createdAt": "2023-12-31T08:00:00.000Z"}
    history = [{"date": "2023-12-30", "completedTasks": [], "totalTasks": None, "completedCount": "x"}]
    _seed(store, {"tasks": [keep], "lastReset": "2024-01-01", "history": history})

    assert [t.title for t in service.list_tasks().tasks] == ["keep me"]
    service.create_task("new")

    assert [t.title for t in service.list_tasks().tasks] == ["keep me", "new"]
    assert [h.to_dict() for h in service.get_history()] == history


def test_missing_last_reset_is_rolled_over(service: TaskService, store) -> None:
    done = {
        "id": "d",
        "title": "done yesterday",
        "completed": True,
        "createdAt": "2023-12-31T08:00:00.000Z",
        "completedAt": "2023-12-31T09:00:00.000Z",
    }
    _seed(store, {"tasks": [done], "history": []})

    listing = service.list_tasks()

    assert listing.last_reset == "2024-01-01"
    assert listing.tasks[0].completed is False
    history = service.get_history()
    assert [h.date for h in history] == ["2023-12-31"]
    assert [t.id for t in history[0].completed_tasks] == ["d"]


def test_concurrent_creates_are_not_lost(service: TaskService, store) -> None:
    workers = 16
    barrier = threading.Barrier(workers)
    errors: list[BaseException] = []

    def create(n: int) -> None:
        try:
            barrier.wait(timeout=5.0)
            service.create_task(f"task {n}")
        except BaseException as e:  # surfaced by the assertion below
            errors.append(e)

    threads = [threading.Thread(target=create, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)

    assert errors == []
    stored = json.loads(store.path.read_text("utf-8"))["tasks"]
    assert sorted(t["title"] for t in stored) == sorted(f"task {n}" for n in range(workers))
    assert len({t["id"] for t in stored}) == workers
