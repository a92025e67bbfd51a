# src/taskdeck/tasks/task_engine.py

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import replace
from datetime import date, datetime

from ..core.confirm import ConfirmationGate, ConfirmationToken
from ..core.events import ChangeEvent, ChangeKind, ChangeNotifier
from ..core.ports import Clock, KeyValueStore, local_now
from ..errors import NotFound, ValidationError
from ..storage.kv_store import TASKS_KEY
from .models import Priority, Task, TaskFilter, normalize_due_date

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class TaskEngine:
    """
    Owner of the general task list.

    Ordering is most-recent-first: new tasks are prepended.
    Every mutation builds the next list, persists it as a whole and only then
    swaps it in, so a failed save leaves the engine unchanged.
    """

    SOURCE = "tasks"

    def __init__(
        self,
        store: KeyValueStore,
        *,
        notifier: ChangeNotifier | None = None,
        clock: Clock | None = None,
        strict_edit_title: bool = False,
    ) -> None:
        self._store = store
        self._notifier = notifier if notifier is not None else ChangeNotifier()
        self._clock = clock or local_now
        self._strict_edit_title = strict_edit_title
        self._gate = ConfirmationGate(self.SOURCE)
        self._tasks: list[Task] = []

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    # ---- helpers ----

    def load(self) -> int:
        """Replace in-memory state with what the store holds. Returns the task count."""
        tasks: list[Task] = []
        seen: set[str] = set()
        for rec in self._store.load(TASKS_KEY):
            task = Task.from_record(rec)
            if task is None:
                continue
            if task.id in seen:
                logger.warning("Dropping duplicate task id=%s", task.id)
                continue
            seen.add(task.id)
            tasks.append(task)
        self._tasks = tasks
        logger.info("TaskEngine loaded tasks=%d", len(tasks))
        return len(tasks)

    def _commit(self, tasks: list[Task], kind: ChangeKind, item_id: str | None) -> None:
        self._store.save(TASKS_KEY, [t.to_record() for t in tasks])
        self._tasks = tasks
        self._notifier.emit(ChangeEvent(source=self.SOURCE, kind=kind, item_id=item_id))

    def _index(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _new_id(self, now: datetime) -> str:
        existing = {t.id for t in self._tasks}
        ms = int(now.timestamp() * 1000)
        while True:
            suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
            candidate = f"{ms}{suffix}"
            if candidate not in existing:
                return candidate

    # ---- reads ----

    def items(self) -> list[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task:
        idx = self._index(task_id)
        if idx is None:
            raise NotFound("task", task_id)
        return self._tasks[idx]

    def filtered_view(self, task_filter: TaskFilter | str | None = TaskFilter.ALL) -> list[Task]:
        """
        Tasks matching the filter, in stored order.

        Always a fresh list; mutating it does not touch engine state.
        """
        flt = TaskFilter.parse(task_filter)
        if flt is TaskFilter.ACTIVE:
            return [t for t in self._tasks if not t.completed]
        if flt is TaskFilter.COMPLETED:
            return [t for t in self._tasks if t.completed]
        return list(self._tasks)

    # ---- mutations ----

    def add(
        self,
        title: str,
        description: str | None = "",
        due_date: str | date | None = "",
        priority: Priority | str | None = None,
    ) -> Task:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title is required")

        now = self._clock()
        task = Task(
            id=self._new_id(now),
            title=title,
            description=description or "",
            due_date=normalize_due_date(due_date),
            priority=Priority.parse(priority),
            completed=False,
            created_at=now,
            completed_at=None,
        )
        self._commit([task, *self._tasks], ChangeKind.ADDED, task.id)
        logger.debug("Task added id=%s priority=%s due=%s", task.id, task.priority.value, task.due_date)
        return task

    def edit(
        self,
        task_id: str,
        *,
        title: str,
        description: str | None = "",
        due_date: str | date | None = "",
        priority: Priority | str | None = None,
    ) -> Task | None:
        """
        Overwrite title/description/due date/priority. Completion state and
        timestamps are never touched. Missing id is a no-op (returns None).
        """
        idx = self._index(task_id)
        if idx is None:
            logger.debug("Task edit ignored, unknown id=%s", task_id)
            return None

        title = (title or "").strip()
        if not title:
            if self._strict_edit_title:
                raise ValidationError("Task title is required")
            logger.warning("Task id=%s edited to an empty title", task_id)

        updated = replace(
            self._tasks[idx],
            title=title,
            description=description or "",
            due_date=normalize_due_date(due_date),
            priority=Priority.parse(priority),
        )
        tasks = list(self._tasks)
        tasks[idx] = updated
        self._commit(tasks, ChangeKind.EDITED, task_id)
        logger.debug("Task edited id=%s", task_id)
        return updated

    def toggle_complete(self, task_id: str) -> Task | None:
        idx = self._index(task_id)
        if idx is None:
            logger.debug("Task toggle ignored, unknown id=%s", task_id)
            return None

        current = self._tasks[idx]
        if current.completed:
            updated = replace(current, completed=False, completed_at=None)
        else:
            updated = replace(current, completed=True, completed_at=self._clock())

        tasks = list(self._tasks)
        tasks[idx] = updated
        self._commit(tasks, ChangeKind.TOGGLED, task_id)
        logger.debug("Task toggled id=%s completed=%s", task_id, updated.completed)
        return updated

    def delete(self, task_id: str) -> bool:
        """Unconditional delete; callers are expected to have confirmed it."""
        idx = self._index(task_id)
        if idx is None:
            return False
        tasks = self._tasks[:idx] + self._tasks[idx + 1 :]
        self._commit(tasks, ChangeKind.DELETED, task_id)
        logger.debug("Task deleted id=%s", task_id)
        return True

    # ---- confirmation protocol ----

    def request_delete(self, task_id: str) -> ConfirmationToken:
        task = self.get(task_id)
        return self._gate.request(task.id, f"Are you sure you want to delete '{task.title}'?")

    def confirm_delete(self, token: ConfirmationToken | str) -> bool:
        removed = self.delete(str(self._gate.resolve(token)))
        self._gate.discard(token)
        return removed

    def cancel_delete(self, token: ConfirmationToken | str) -> bool:
        return self._gate.discard(token)
