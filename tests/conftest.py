# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from daily_tracker.core.state import AppState
from daily_tracker.tasks.task_api import TaskService
from daily_tracker.tasks.task_store import TaskStore


class FakeClock:
    """
    Deterministic Clock for unit tests.

    Tests move `current` forward to simulate the calendar advancing;
    timestamps are numbered so every call yields a distinct value.
    """

    def __init__(self, current: date) -> None:
        self.current = current
        self._ticks = 0

    def today(self) -> date:
        return self.current

    def now_iso(self) -> str:
        self._ticks += 1
        return f"{self.current.isoformat()}T12:00:{self._ticks % 60:02d}.000Z"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(date(2024, 1, 1))


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and connectors.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="daily-tracker-test",
        data_dir=tmp_path,
        data_file=tmp_path / "tasks.json",
        on_corrupt="reset",
        timezone="UTC",
        http_enabled=False,
        host="127.0.0.1",
        port=0,
        console_enabled=False,
        rollover_interval_seconds=0.0,
    )


@pytest.fixture()
def store(settings: SimpleNamespace, clock: FakeClock) -> TaskStore:
    return TaskStore(settings.data_file, on_corrupt=settings.on_corrupt, clock=clock)


@pytest.fixture()
def service(store: TaskStore, clock: FakeClock) -> TaskService:
    return TaskService(store, clock)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, service: TaskService) -> AppState:
    """
    AppState wired with the fake clock.

    NOTE: the real JSON TaskStore is used because its behaviour is part of
    what we want to test.
    """
    return AppState(settings=settings, store=store, service=service)
