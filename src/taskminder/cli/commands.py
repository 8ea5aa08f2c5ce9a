# src/taskminder/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import date
from pathlib import Path

from ..core.errors import NotFoundError, TaskManagerError
from ..core.state import AppState
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

# key=value option names accepted by /add and /edit -> task field names.
_FIELD_ALIASES = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "due": "due_date",
    "due_date": "due_date",
    "tags": "tags",
    "tag": "tags",
    "prio": "priority",
    "priority": "priority",
    "parent": "parent_task_id",
    "parent_task_id": "parent_task_id",
    "status": "status",
}


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
        Domain errors become a one-line reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except TaskManagerError as e:
            logger.info("/%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument / display helpers ----


def split_args(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate positional words from key=value options."""
    positional: list[str] = []
    options: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key:
            options[key.strip().lower()] = value
        else:
            positional.append(arg)
    return positional, options


def _task_fields(options: dict[str, str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for key, value in options.items():
        name = _FIELD_ALIASES.get(key)
        if name is None:
            raise TaskManagerError(f"unknown option: {key}")
        fields[name] = value
    return fields


def format_task_line(task: Task, today: date) -> str:
    mark = "x" if task.is_completed else " "
    bits = [f"[{mark}] {task.id[:8]}  {task.title}"]
    if task.due_date:
        bits.append(f"due {task.due_date.isoformat()}")
    if task.priority:
        bits.append(task.priority.value.upper())
    if task.tags:
        bits.append("#" + " #".join(task.tags))
    if task.is_overdue(today):
        bits.append("OVERDUE")
    return "  ".join(bits)


def format_task_details(task: Task, today: date) -> str:
    lines = [
        f"ID: {task.id}",
        f"Title: {task.title}",
        f"Description: {task.description}",
        f"Status: {task.status.value}" + (" (OVERDUE)" if task.is_overdue(today) else ""),
        f"Due Date: {task.due_date.isoformat() if task.due_date else 'N/A'}",
        f"Priority: {task.priority.value if task.priority else 'N/A'}",
        f"Tags: {', '.join(task.tags) if task.tags else 'N/A'}",
        f"Created At: {task.created_at:%Y-%m-%d %H:%M:%S}",
    ]
    if task.completed_at:
        lines.append(f"Completed At: {task.completed_at:%Y-%m-%d %H:%M:%S}")
    if task.parent_task_id:
        lines.append(f"Parent Task: {task.parent_task_id}")
    return "\n".join(lines)


def _format_list(state: AppState, tasks: list[Task], header: str) -> str:
    if not tasks:
        return "No tasks found."
    today = state.service.clock.today()
    return "\n".join([header, *(format_task_line(t, today) for t in tasks)])


def resolve_task_id(state: AppState, raw: str) -> str:
    """Accept a full id or a unique prefix of one (as printed by /list)."""
    try:
        return state.service.find_task_by_id(raw).id
    except NotFoundError:
        pass
    matches = [t.id for t in state.service.list_tasks() if t.id.startswith(raw)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise NotFoundError(f"task id prefix '{raw}' is ambiguous ({len(matches)} matches)")
    raise NotFoundError(f"task '{raw}' not found")


def _require_id(args: list[str], usage: str) -> str:
    if not args:
        raise TaskManagerError(f"Usage: {usage}")
    return args[0]


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_user(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Current owner: {state.service.current_owner_id or '(none)'}"
    state.service.set_current_owner(args[0])
    return f"Switched to owner {state.service.current_owner_id}."


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add "Title" "Description" [due=YYYY-MM-DD] [tags=a,b] [priority=high] [parent=ID]
    """
    positional, options = split_args(args)
    fields = _task_fields(options)
    if positional:
        fields.setdefault("title", positional[0])
    if len(positional) > 1:
        fields.setdefault("description", " ".join(positional[1:]))
    fields.setdefault("description", fields.get("title", ""))
    task = state.service.add_task(fields)
    return f"Task '{task.title}' added with ID {task.id}."


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list [pending|completed] [overdue] [tag=x] [before=D] [after=D] [on=D] [sort=priority]
    """
    positional, options = split_args(args)
    words = {p.lower() for p in positional}
    status = None
    if "pending" in words:
        status = "pending"
    elif "completed" in words or "done" in words:
        status = "completed"

    tasks = state.service.list_tasks(
        tags=options.get("tag") or options.get("tags"),
        status=options.get("status") or status,
        overdue="overdue" in words,
        due_before=options.get("before"),
        due_after=options.get("after"),
        due_on=options.get("on"),
        sort_by=options.get("sort"),
    )
    return _format_list(state, tasks, f"Tasks of {state.service.current_owner_id} ({len(tasks)}):")


def cmd_show(state: AppState, args: list[str]) -> str:
    task = state.service.find_task_by_id(resolve_task_id(state, _require_id(args, "/show ID")))
    return format_task_details(task, state.service.clock.today())


def cmd_edit(state: AppState, args: list[str]) -> str:
    task_id = resolve_task_id(state, _require_id(args, "/edit ID key=value ..."))
    _, options = split_args(args[1:])
    fields = _task_fields(options)
    if not fields:
        return "Nothing to change. Usage: /edit ID title=... due=... tags=... priority=..."
    task = state.service.update_task(task_id, fields)
    return f"Task '{task.title}' updated."


def cmd_done(state: AppState, args: list[str]) -> str:
    task = state.service.complete_task(resolve_task_id(state, _require_id(args, "/done ID")))
    return f"Task '{task.title}' marked as completed."


def cmd_reopen(state: AppState, args: list[str]) -> str:
    task = state.service.reopen_task(resolve_task_id(state, _require_id(args, "/reopen ID")))
    return f"Task '{task.title}' reopened."


def cmd_rm(state: AppState, args: list[str]) -> str:
    task = state.service.delete_task(resolve_task_id(state, _require_id(args, "/rm ID")))
    return f"Task '{task.title}' deleted."


def cmd_overdue(state: AppState, args: list[str]) -> str:
    return _format_list(state, state.service.check_overdue_tasks(), "Overdue tasks:")


def cmd_soon(state: AppState, args: list[str]) -> str:
    return _format_list(state, state.service.check_due_soon_tasks(), "Tasks due soon:")


def _format_for(path: str, options: dict[str, str], default: str) -> str:
    if options.get("format"):
        return options["format"]
    return Path(path).suffix.lstrip(".") or default


def cmd_export(state: AppState, args: list[str]) -> str:
    positional, options = split_args(args)
    path = _require_id(positional, "/export PATH [format=csv|json]")
    n = state.service.export_tasks(_format_for(path, options, state.settings.export_format), path)
    return f"Exported {n} task(s) to {path}."


def cmd_import(state: AppState, args: list[str]) -> str:
    positional, options = split_args(args)
    path = _require_id(positional, "/import PATH [format=csv|json]")
    report = state.service.import_tasks(_format_for(path, options, state.settings.export_format), path)
    lines = [f"Imported {report.count} task(s) from {path}."]
    if report.warnings:
        lines.append(f"Skipped {len(report.warnings)} row(s):")
        lines.extend(f"  {w}" for w in report.warnings)
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("user", cmd_user, help_text="Show or switch the current owner: /user [ID].")
registry.register("add", cmd_add, help_text='Add a task: /add "Title" "Description" due=... tags=a,b priority=high.')
registry.register("list", cmd_list, help_text="List tasks: /list [pending|completed] [overdue] tag=... sort=priority.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show ID.")
registry.register("edit", cmd_edit, help_text="Change fields: /edit ID key=value ...")
registry.register("done", cmd_done, help_text="Complete a task: /done ID.", aliases=["complete"])
registry.register("reopen", cmd_reopen, help_text="Mark a task pending again: /reopen ID.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm ID.", aliases=["delete"])
registry.register("overdue", cmd_overdue, help_text="Check (and notify) overdue tasks.")
registry.register("soon", cmd_soon, help_text="Check (and notify) tasks due soon.")
registry.register("export", cmd_export, help_text="Export tasks: /export PATH [format=csv|json].")
registry.register("import", cmd_import, help_text="Import tasks: /import PATH [format=csv|json].")
