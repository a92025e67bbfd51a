# src/taskdeck/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..calendar_grid import WEEKDAY_HEADERS, month_grid, shift_month
from ..core.state import AppContext
from ..errors import ValidationError
from ..tasks.daily_engine import DailyChecklist
from ..tasks.models import DailyTask, Task, TaskFilter
from ..tasks.task_engine import TaskEngine

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppContext, list[str]], str]
CommandHandler3 = Callable[[AppContext, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._emitting: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        emits: bool = False,
    ) -> None:
        """`emits` handlers take a third `emit` argument for progress notes."""
        key = name.lower()
        names = [key, *(a.lower() for a in aliases or [])]
        for n in names:
            self._handlers[n] = handler
            if emits:
                self._emitting.add(n)
        self._help[key] = help_text

    def handle(
        self,
        ctx: AppContext,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Domain errors (TaskdeckError) propagate to the caller.
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

        if name in self._emitting:
            return cast(CommandHandler3, handler)(ctx, args, emit)
        return cast(CommandHandler2, handler)(ctx, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_date(d: date | None) -> str:
    """Long form used next to due dates, e.g. "Oct 19, 2026"."""
    if d is None:
        return ""
    return f"{d:%b} {d.day}, {d.year}"


def _format_task(pos: int, t: Task) -> str:
    box = "[x]" if t.completed else "[ ]"
    line = f"#{pos} {box} {t.title} ({t.priority.value})"
    if t.due_date:
        line += f" due {format_date(t.due)}"
    if t.description:
        line += f"\n      {t.description}"
    return line


def _format_daily(pos: int, item: DailyTask) -> str:
    box = "[x]" if item.completed else "[ ]"
    return f"{pos}. {box} {item.name}"


def _split_fields(args: list[str]) -> list[str]:
    """Join args back and split on "|": title | description | due | priority."""
    return [p.strip() for p in " ".join(args).split("|")]


def _field(fields: list[str], i: int) -> str:
    return fields[i] if i < len(fields) else ""


def _position(ref: str) -> int:
    try:
        return int(ref.lstrip("#"))
    except ValueError:
        raise ValidationError(f"Not a list position: {ref}") from None


def _resolve_task(engine: TaskEngine, ref: str) -> Task:
    """Positions are 1-based over the full list (1 = newest); raw ids work too."""
    tasks = engine.items()
    for t in tasks:
        if t.id == ref:
            return t
    pos = _position(ref)
    if not 1 <= pos <= len(tasks):
        raise ValidationError(f"No task #{pos}. Use /tasks to list them.")
    return tasks[pos - 1]


def _resolve_daily(daily: DailyChecklist, ref: str) -> DailyTask:
    items = daily.items()
    pos = _position(ref)
    if not 1 <= pos <= len(items):
        raise ValidationError(f"No daily task {pos}. Use /daily to list them.")
    return items[pos - 1]


def render_tasks(ctx: AppContext) -> str:
    positions = {t.id: i for i, t in enumerate(ctx.tasks.items(), start=1)}
    shown = ctx.tasks.filtered_view(ctx.task_filter)
    header = f"Tasks ({ctx.task_filter.value}):"
    if not shown:
        return f"{header}\n  No tasks to display"
    return "\n".join([header, *(_format_task(positions[t.id], t) for t in shown)])


def render_daily(ctx: AppContext) -> str:
    done, total = ctx.daily.progress()
    header = f"Daily tasks {done}/{total}:"
    items = ctx.daily.items()
    if not items:
        return f"{header}\n  No daily tasks yet. Add your first one with /daily add <name>"
    lines = [header, *(_format_daily(i, item) for i, item in enumerate(items, start=1))]
    if ctx.daily.is_full():
        lines.append(f"  (limit of {ctx.daily.capacity} reached)")
    return "\n".join(lines)


# ---- handlers ----


def cmd_help(ctx: AppContext, args: list[str]) -> str:
    return registry.build_help()


def cmd_tasks(ctx: AppContext, args: list[str]) -> str:
    """
    /tasks                      -> list with the current filter
    /tasks active|completed|all -> switch filter, then list
    """
    if args:
        ctx.task_filter = TaskFilter.parse(args[0])
    return render_tasks(ctx)


def cmd_add(ctx: AppContext, args: list[str]) -> str:
    fields = _split_fields(args)
    if not _field(fields, 0):
        return "Usage: /add <title> [| description [| due YYYY-MM-DD [| low|medium|high]]]"
    task = ctx.tasks.add(
        _field(fields, 0),
        description=_field(fields, 1),
        due_date=_field(fields, 2),
        priority=_field(fields, 3),
    )
    return f"Added: {task.title} ({task.priority.value})"


def cmd_edit(ctx: AppContext, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <#> <title> [| description [| due [| priority]]]"
    task = _resolve_task(ctx.tasks, args[0])
    fields = _split_fields(args[1:])
    updated = ctx.tasks.edit(
        task.id,
        title=_field(fields, 0),
        description=_field(fields, 1),
        due_date=_field(fields, 2),
        priority=_field(fields, 3),
    )
    if updated is None:
        return "Task no longer exists."
    return f"Updated: {updated.title}"


def cmd_done(ctx: AppContext, args: list[str]) -> str:
    if not args:
        return "Usage: /done <#>"
    task = _resolve_task(ctx.tasks, args[0])
    updated = ctx.tasks.toggle_complete(task.id)
    if updated is None:
        return "Task no longer exists."
    return f"{'Completed' if updated.completed else 'Reopened'}: {updated.title}"


def cmd_delete(ctx: AppContext, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <#>"
    task = _resolve_task(ctx.tasks, args[0])
    ctx.pending_delete = ctx.tasks.request_delete(task.id)
    return f"{ctx.pending_delete.prompt} Reply /yes or /no."


def _engine_for_scope(ctx: AppContext, scope: str) -> TaskEngine | DailyChecklist:
    return ctx.daily if scope == DailyChecklist.SOURCE else ctx.tasks


def cmd_yes(ctx: AppContext, args: list[str]) -> str:
    token = ctx.pending_delete
    if token is None:
        return "Nothing to confirm."
    removed = _engine_for_scope(ctx, token.scope).confirm_delete(token)
    # Cleared only after the delete persisted; a failed /yes can be retried.
    ctx.pending_delete = None
    return "Deleted." if removed else "Already gone."


def cmd_no(ctx: AppContext, args: list[str]) -> str:
    token = ctx.pending_delete
    if token is None:
        return "Nothing to cancel."
    ctx.pending_delete = None
    _engine_for_scope(ctx, token.scope).cancel_delete(token)
    return "Kept."


def cmd_daily(ctx: AppContext, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /daily                    -> checklist with progress
    /daily add <name>         -> add (max 5)
    /daily done <n>           -> toggle
    /daily rename <n> <name>  -> rename
    /daily del <n>            -> remove (asks for confirmation)
    """
    if not args:
        return render_daily(ctx)

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        item = ctx.daily.add(" ".join(rest))
        if emit is not None and ctx.daily.is_full():
            emit(f"Daily list is full ({ctx.daily.capacity}). Remove one before adding more.")
        return f"Added daily task: {item.name}\n{render_daily(ctx)}"

    if sub in ("done", "toggle") and rest:
        ctx.daily.toggle(_resolve_daily(ctx.daily, rest[0]).id)
        return render_daily(ctx)

    if sub in ("rename", "edit") and len(rest) >= 2:
        item = _resolve_daily(ctx.daily, rest[0])
        ctx.daily.edit(item.id, " ".join(rest[1:]))
        return render_daily(ctx)

    if sub in ("del", "delete", "rm") and rest:
        item = _resolve_daily(ctx.daily, rest[0])
        ctx.pending_delete = ctx.daily.request_delete(item.id)
        return f"{ctx.pending_delete.prompt} Reply /yes or /no."

    return (
        "Usage:\n"
        "  /daily                    - show checklist\n"
        "  /daily add <name>         - add a daily task\n"
        "  /daily done <n>           - toggle a daily task\n"
        "  /daily rename <n> <name>  - rename a daily task\n"
        "  /daily del <n>            - remove a daily task\n"
    )


def cmd_stats(ctx: AppContext, args: list[str]) -> str:
    snap = ctx.analytics.snapshot
    if snap.computed_at.date() != ctx.clock().date():
        snap = ctx.analytics.refresh()
    lines = [f"Completed: {snap.split.completed}  Pending: {snap.split.pending}", "Completed per day:"]
    for day in snap.histogram:
        lines.append(f"  {day.label:>6} | {'#' * day.count} {day.count}")
    return "\n".join(lines)


def cmd_cal(ctx: AppContext, args: list[str]) -> str:
    """
    /cal              -> current month (or the one last shown)
    /cal prev|next    -> navigate
    /cal today        -> back to this month
    /cal YYYY-MM      -> jump
    """
    today = ctx.clock().date()
    year, month = ctx.calendar_month or (today.year, today.month)

    if args:
        arg = args[0].lower()
        if arg == "prev":
            year, month = shift_month(year, month, -1)
        elif arg == "next":
            year, month = shift_month(year, month, 1)
        elif arg == "today":
            year, month = today.year, today.month
        else:
            try:
                y, m = arg.split("-", 1)
                year, month = int(y), int(m)
            except ValueError:
                return "Usage: /cal [prev|next|today|YYYY-MM]"
            if not 1 <= month <= 12:
                return "Usage: /cal [prev|next|today|YYYY-MM]"

    ctx.calendar_month = (year, month)
    grid = month_grid(year, month, today)

    lines = [grid.title, " ".join(f"{h:>4}" for h in WEEKDAY_HEADERS)]
    for week in grid.weeks():
        cells = []
        for cell in week:
            if cell.is_today:
                cells.append(f"[{cell.day:2d}]")
            elif cell.in_month:
                cells.append(f" {cell.day:2d} ")
            else:
                cells.append(f"({cell.day:2d})")
        lines.append(" ".join(cells))
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [all|active|completed].", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add title | description | YYYY-MM-DD | priority.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <#> title | description | due | priority.")
registry.register("done", cmd_done, help_text="Toggle task completion: /done <#>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task (asks first): /delete <#>.", aliases=["del", "rm"])
registry.register("yes", cmd_yes, help_text="Confirm a pending delete.", aliases=["y"])
registry.register("no", cmd_no, help_text="Cancel a pending delete.", aliases=["n"])
registry.register("daily", cmd_daily, help_text="Daily checklist: /daily [add|done|rename|del].", emits=True)
registry.register("stats", cmd_stats, help_text="Completion split and last 7 days.")
registry.register("cal", cmd_cal, help_text="Calendar: /cal [prev|next|today|YYYY-MM].")
