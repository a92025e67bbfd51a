# src/taskdeck/analytics/aggregator.py

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import NamedTuple

from ..core.events import ChangeEvent, ChangeKind
from ..core.ports import Clock, local_now
from ..tasks.models import Task
from ..tasks.task_engine import TaskEngine

logger = logging.getLogger(__name__)

HISTORY_DAYS = 7

# Edits never change completion status or membership.
_RECOMPUTE_ON = frozenset({ChangeKind.ADDED, ChangeKind.DELETED, ChangeKind.TOGGLED})


class CompletionSplit(NamedTuple):
    completed: int
    pending: int


class DayCount(NamedTuple):
    day: date
    label: str
    count: int


def day_label(d: date) -> str:
    """Short chart label, e.g. "Oct 19"."""
    return f"{d:%b} {d.day}"


def completion_split(tasks: Iterable[Task]) -> CompletionSplit:
    completed = pending = 0
    for t in tasks:
        if t.completed:
            completed += 1
        else:
            pending += 1
    return CompletionSplit(completed=completed, pending=pending)


def last_seven_days_histogram(
    tasks: Iterable[Task], now: datetime, *, days: int = HISTORY_DAYS
) -> list[DayCount]:
    """
    Completed-per-day counts for [now - (days-1), now], oldest first.

    completed_at is converted to now's timezone before truncating to a date.
    """
    today = now.date()
    per_day: Counter[date] = Counter()
    for t in tasks:
        if t.completed_at is None:
            continue
        per_day[t.completed_at.astimezone(now.tzinfo).date()] += 1

    out: list[DayCount] = []
    for offset in range(days - 1, -1, -1):
        d = today - timedelta(days=offset)
        out.append(DayCount(day=d, label=day_label(d), count=per_day.get(d, 0)))
    return out


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    split: CompletionSplit
    histogram: list[DayCount]
    computed_at: datetime


class Analytics:
    """
    Keeps an AnalyticsSnapshot in sync with a TaskEngine.

    Subscribes to the engine's notifier and recomputes only on events that can
    change completion status or membership.
    """

    def __init__(self, engine: TaskEngine, *, clock: Clock | None = None) -> None:
        self._engine = engine
        self._clock = clock or local_now
        self._snapshot = self._compute()
        self.recompute_count = 0
        self._unsubscribe = engine.notifier.subscribe(self._on_change)

    @property
    def snapshot(self) -> AnalyticsSnapshot:
        return self._snapshot

    def _compute(self) -> AnalyticsSnapshot:
        tasks = self._engine.items()
        now = self._clock()
        return AnalyticsSnapshot(
            split=completion_split(tasks),
            histogram=last_seven_days_histogram(tasks, now),
            computed_at=now,
        )

    def refresh(self) -> AnalyticsSnapshot:
        self._snapshot = self._compute()
        self.recompute_count += 1
        logger.debug(
            "Analytics recomputed completed=%d pending=%d",
            self._snapshot.split.completed,
            self._snapshot.split.pending,
        )
        return self._snapshot

    def _on_change(self, event: ChangeEvent) -> None:
        if event.kind in _RECOMPUTE_ON:
            self.refresh()

    def close(self) -> None:
        self._unsubscribe()
