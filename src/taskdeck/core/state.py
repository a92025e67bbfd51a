# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..analytics.aggregator import Analytics
from ..tasks.daily_engine import DailyChecklist
from ..tasks.models import TaskFilter
from ..tasks.task_engine import TaskEngine
from .confirm import ConfirmationToken
from .ports import Clock, KeyValueStore


@dataclass
class AppContext:
    """
    Everything a front-end needs, passed around explicitly.

    Each engine exclusively owns its collection; analytics only reads the
    task engine. The remaining fields are view state of the front-end.
    """

    settings: Any
    store: KeyValueStore
    clock: Clock
    tasks: TaskEngine
    daily: DailyChecklist
    analytics: Analytics

    task_filter: TaskFilter = TaskFilter.ALL
    calendar_month: tuple[int, int] | None = None
    pending_delete: ConfirmationToken | None = None
