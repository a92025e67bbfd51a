# src/taskdeck/tasks/daily_engine.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import NamedTuple

from ..core.confirm import ConfirmationGate, ConfirmationToken
from ..core.events import ChangeEvent, ChangeKind, ChangeNotifier
from ..core.ports import Clock, KeyValueStore, local_now
from ..errors import CapacityExceeded, NotFound, ValidationError
from ..storage.kv_store import DAILY_TASKS_KEY, LAST_DAILY_RESET_KEY
from .models import DailyTask

logger = logging.getLogger(__name__)

MAX_DAILY_TASKS = 5


class DailyProgress(NamedTuple):
    completed: int
    total: int


class DailyChecklist:
    """
    Bounded list of recurring items (at most MAX_DAILY_TASKS), kept in
    insertion order. Completion flags are cleared once per local calendar day
    by reset_if_new_day().
    """

    SOURCE = "daily"

    def __init__(
        self,
        store: KeyValueStore,
        *,
        notifier: ChangeNotifier | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier if notifier is not None else ChangeNotifier()
        self._clock = clock or local_now
        self._gate = ConfirmationGate(self.SOURCE)
        self._items: list[DailyTask] = []

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def capacity(self) -> int:
        return MAX_DAILY_TASKS

    def load(self) -> int:
        items: list[DailyTask] = []
        seen: set[int] = set()
        for rec in self._store.load(DAILY_TASKS_KEY):
            item = DailyTask.from_record(rec)
            if item is None or item.id in seen:
                continue
            seen.add(item.id)
            items.append(item)
        if len(items) > MAX_DAILY_TASKS:
            # Never truncate stored data; adds stay rejected until the list shrinks.
            logger.warning("Stored daily list holds %d items (limit %d)", len(items), MAX_DAILY_TASKS)
        self._items = items
        logger.info("DailyChecklist loaded items=%d", len(items))
        return len(items)

    def initialize(self) -> bool:
        """Load from the store and run the reset sweep. Returns whether a reset happened."""
        self.load()
        return self.reset_if_new_day()

    def _commit(self, items: list[DailyTask], kind: ChangeKind, item_id: int | None) -> None:
        self._store.save(DAILY_TASKS_KEY, [i.to_record() for i in items])
        self._items = items
        self._notifier.emit(ChangeEvent(source=self.SOURCE, kind=kind, item_id=item_id))

    def _index(self, item_id: int) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        return None

    def _new_id(self) -> int:
        existing = {i.id for i in self._items}
        candidate = int(self._clock().timestamp() * 1000)
        while candidate in existing:
            candidate += 1
        return candidate

    # ---- reads ----

    def items(self) -> list[DailyTask]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: int) -> DailyTask:
        idx = self._index(item_id)
        if idx is None:
            raise NotFound("daily task", item_id)
        return self._items[idx]

    def progress(self) -> DailyProgress:
        return DailyProgress(
            completed=sum(1 for i in self._items if i.completed),
            total=len(self._items),
        )

    def is_full(self) -> bool:
        return len(self._items) >= MAX_DAILY_TASKS

    # ---- reset sweep ----

    def reset_if_new_day(self, now: datetime | None = None) -> bool:
        """
        Clear every completion flag when the stored marker names a different
        local date than `now`. The list is saved and swapped in before the marker is written.
        """
        today = (now or self._clock()).date().isoformat()
        last = self._store.get_marker(LAST_DAILY_RESET_KEY)
        if last == today:
            return False

        items = [replace(i, completed=False) for i in self._items]
        self._store.save(DAILY_TASKS_KEY, [i.to_record() for i in items])
        self._items = items
        self._notifier.emit(ChangeEvent(source=self.SOURCE, kind=ChangeKind.RESET))
        # A failed marker write only means the sweep runs again next start.
        self._store.set_marker(LAST_DAILY_RESET_KEY, today)
        logger.info("Daily reset sweep ran (last=%s today=%s items=%d)", last, today, len(items))
        return True

    # ---- mutations ----

    def add(self, name: str) -> DailyTask:
        # Capacity is checked before the name, so a full list always reports capacity.
        if self.is_full():
            raise CapacityExceeded(MAX_DAILY_TASKS)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Daily task name is required")

        item = DailyTask(id=self._new_id(), name=name, completed=False)
        self._commit([*self._items, item], ChangeKind.ADDED, item.id)
        logger.debug("Daily task added id=%s", item.id)
        return item

    def edit(self, item_id: int, new_name: str) -> DailyTask | None:
        idx = self._index(item_id)
        new_name = (new_name or "").strip()
        if idx is None or not new_name:
            return None
        updated = replace(self._items[idx], name=new_name)
        items = list(self._items)
        items[idx] = updated
        self._commit(items, ChangeKind.EDITED, item_id)
        logger.debug("Daily task renamed id=%s", item_id)
        return updated

    def toggle(self, item_id: int) -> DailyTask | None:
        idx = self._index(item_id)
        if idx is None:
            return None
        updated = replace(self._items[idx], completed=not self._items[idx].completed)
        items = list(self._items)
        items[idx] = updated
        self._commit(items, ChangeKind.TOGGLED, item_id)
        logger.debug("Daily task toggled id=%s completed=%s", item_id, updated.completed)
        return updated

    def delete(self, item_id: int) -> bool:
        """Unconditional delete; callers are expected to have confirmed it."""
        idx = self._index(item_id)
        if idx is None:
            return False
        items = self._items[:idx] + self._items[idx + 1 :]
        self._commit(items, ChangeKind.DELETED, item_id)
        logger.debug("Daily task deleted id=%s", item_id)
        return True

    # ---- confirmation protocol ----

    def request_delete(self, item_id: int) -> ConfirmationToken:
        item = self.get(item_id)
        return self._gate.request(item.id, f"Remove daily task '{item.name}'?")

    def confirm_delete(self, token: ConfirmationToken | str) -> bool:
        removed = self.delete(int(self._gate.resolve(token)))
        self._gate.discard(token)
        return removed

    def cancel_delete(self, token: ConfirmationToken | str) -> bool:
        return self._gate.discard(token)
