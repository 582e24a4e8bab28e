# src/daily_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.errors import NotFoundError, TrackerError
from ..core.state import AppState
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Expected failures (validation, unknown task, storage) become replies;
        anything else propagates to the connector.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TrackerError as e:
            logger.info("Command /%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

_PRIORITY_MARK = {"low": "·", "medium": "•", "high": "!"}


def _format_task(pos: int, task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    mark = _PRIORITY_MARK.get(task.priority.value, " ")
    line = f"{pos:>3}. {box} {mark} {task.title}"
    if task.description:
        line += f" - {task.description}"
    return line


def _resolve_task_id(state: AppState, ref: str) -> str:
    """Accept a 1-based list position or a full task id."""
    tasks = state.service.list_tasks().tasks
    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1].id
    for t in tasks:
        if t.id == ref:
            return t.id
    raise NotFoundError(ref)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    listing = state.service.list_tasks()
    if not listing.tasks:
        return f"No tasks for {listing.last_reset}. Add one with /add <title>."
    lines = [f"Tasks for {listing.last_reset}:"]
    lines.extend(_format_task(i, t) for i, t in enumerate(listing.tasks, start=1))
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Buy milk                    -> medium priority, no description
    /add Buy milk | 2 litres !high   -> description + priority
    """
    priority = None
    words: list[str] = []
    for word in args:
        if word.startswith("!") and len(word) > 1:
            priority = word[1:]
        else:
            words.append(word)

    title, _, description = " ".join(words).partition("|")
    task = state.service.create_task(title, description=description or None, priority=priority)
    return f"Added: {task.title} ({task.priority.value})"


def _set_completed(state: AppState, args: list[str], done: bool) -> str:
    if not args:
        return f"Usage: /{'done' if done else 'undo'} <n|id>"
    task = state.service.update_task(_resolve_task_id(state, args[0]), {"completed": done})
    return f"{'Completed' if done else 'Reopened'}: {task.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_rename(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /rename <n|id> <new title>"
    task = state.service.update_task(_resolve_task_id(state, args[0]), {"title": " ".join(args[1:])})
    return f"Renamed: {task.title}"


def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /priority <n|id> low|medium|high"
    task = state.service.update_task(_resolve_task_id(state, args[0]), {"priority": args[1]})
    return f"Priority of {task.title}: {task.priority.value}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n|id>"
    task = state.service.delete_task(_resolve_task_id(state, args[0]))
    return f"Deleted: {task.title}"


def cmd_history(state: AppState, args: list[str]) -> str:
    """
    /history     -> last 7 archived days
    /history 30  -> last 30 archived days
    """
    limit = 7
    if args:
        try:
            limit = max(1, int(args[0]))
        except ValueError:
            return "Usage: /history [days]"

    entries = state.service.get_history()[-limit:]
    if not entries:
        return "History is empty."
    lines = ["History:"]
    for entry in entries:
        lines.append(f"  {entry.date}: {entry.completed_count}/{entry.total_tasks} completed")
        lines.extend(f"      - {t.title}" for t in entry.completed_tasks)
    return "\n".join(lines)


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.service.get_stats()
    return (
        f"Stats for {stats.today}:\n"
        f"  Total: {stats.total_tasks}\n"
        f"  Completed: {stats.completed_tasks}\n"
        f"  Pending: {stats.pending_tasks}\n"
        f"  Completion: {stats.completion_rate}%"
    )


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    return (
        "Status:\n"
        f"  Data file: {state.store.path}\n"
        f"  Timezone: {getattr(settings, 'timezone', 'UTC')}\n"
        f"  Corrupt file policy: {getattr(settings, 'on_corrupt', 'reset')}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List today's tasks.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [| description] [!low|!medium|!high]."
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <n|id>.")
registry.register("undo", cmd_undo, help_text="Mark a task not completed: /undo <n|id>.")
registry.register("rename", cmd_rename, help_text="Change a task title: /rename <n|id> <title>.")
registry.register(
    "priority", cmd_priority, help_text="Change priority: /priority <n|id> low|medium|high."
)
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n|id>.", aliases=["delete"])
registry.register("history", cmd_history, help_text="Show archived days: /history [days].")
registry.register("stats", cmd_stats, help_text="Show today's completion stats.")
registry.register("status", cmd_status, help_text="Show storage/calendar settings.")
