# src/daily_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from collections.abc import Iterator
from pathlib import Path

from ..core.clock import SystemClock
from ..core.errors import CorruptDocumentError, PersistenceError
from ..core.ports import Clock
from .task_models import TaskDocument

logger = logging.getLogger(__name__)


class TaskStore:
    """
    JSON file task store: the sole writer of the task document.

    There is no in-memory cache: every logical operation re-reads the file,
    mutates the document and writes it back in full.

    Read policy (on_corrupt):
    - "reset": a corrupt file is logged and replaced by a fresh document on next save
    - "fail":  a corrupt file raises CorruptDocumentError

    Thread-safety:
    - load/save are not serialized on their own; callers hold locked()
      around the whole load-mutate-save cycle.
    """

    def __init__(
        self,
        path: str | Path = "tasks.json",
        *,
        on_corrupt: str = "reset",
        clock: Clock | None = None,
    ) -> None:
        if on_corrupt not in ("reset", "fail"):
            raise ValueError(f"unknown on_corrupt policy: {on_corrupt!r}")

        self._path = Path(path)
        self._on_corrupt = on_corrupt
        self._clock: Clock = clock or SystemClock()
        self._lock = threading.RLock()

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create data directory: {e}", path=self._path) from e

        with self.locked():
            if not self._path.exists():
                self.save(TaskDocument.fresh(self._clock.today()))
                logger.info("TaskStore initialized empty document at %s", self._path)
            total = len(self.load().tasks)

        logger.info("TaskStore ready path=%s tasks=%s policy=%s", self._path, total, on_corrupt)

    @property
    def path(self) -> Path:
        return self._path

    @contextlib.contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store's mutual exclusion for one load-mutate-save cycle."""
        with self._lock:
            yield

    # ---- public API ----

    def load(self) -> TaskDocument:
        if not self._path.exists():
            return TaskDocument.fresh(self._clock.today())

        try:
            raw = json.loads(self._path.read_text("utf-8"))
            return TaskDocument.from_dict(raw)
        except (OSError, ValueError, TypeError, KeyError) as e:
            if self._on_corrupt == "fail":
                raise CorruptDocumentError(
                    f"Cannot read task document: {e}", path=self._path
                ) from e
            logger.exception(
                "Failed to read task document %s; starting from an empty document.", self._path
            )
            return TaskDocument.fresh(self._clock.today())

    def save(self, document: TaskDocument) -> None:
        """Overwrite the document (temp file + os.replace). Raises PersistenceError."""
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            payload = json.dumps(document.to_dict(), ensure_ascii=False, indent=2)
            tmp.write_text(payload, "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.exception("Failed to write task document %s", self._path)
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to save tasks: {e}", path=self._path) from e

        logger.debug(
            "Saved task document tasks=%d history=%d lastReset=%s",
            len(document.tasks),
            len(document.history),
            document.last_reset,
        )
