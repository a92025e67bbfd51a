# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, engines and analytics into an AppContext,
- runs the daily reset sweep once, before anything is shown.
"""

from __future__ import annotations

import logging

from ..analytics.aggregator import Analytics
from ..config import get_settings
from ..core.events import ChangeNotifier
from ..core.ports import Clock, KeyValueStore, local_now
from ..core.state import AppContext
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.daily_engine import DailyChecklist
from ..tasks.task_engine import TaskEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_app_context(
    *,
    settings=None,
    store: KeyValueStore | None = None,
    clock: Clock | None = None,
) -> AppContext:
    """
    Build an AppContext from the provided settings.

    Settings, store and clock are injectable so tests avoid hidden global config
    reads and real wall-clock time. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    clock = clock or local_now

    if store is None:
        _ensure_local_dirs(settings)
        store = SqliteKeyValueStore(settings.store_db_path)

    tasks = TaskEngine(
        store,
        notifier=ChangeNotifier(),
        clock=clock,
        strict_edit_title=bool(getattr(settings, "strict_edit_title", False)),
    )
    tasks.load()

    daily = DailyChecklist(store, notifier=ChangeNotifier(), clock=clock)
    if daily.initialize():
        logger.info("Daily checklist reset for a new day.")

    ctx = AppContext(
        settings=settings,
        store=store,
        clock=clock,
        tasks=tasks,
        daily=daily,
        analytics=Analytics(tasks, clock=clock),
    )
    logger.info("App context ready tasks=%d daily=%d", len(tasks), len(daily))
    return ctx
