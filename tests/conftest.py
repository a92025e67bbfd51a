# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.cli.bootstrap import create_app_context
from taskdeck.core.state import AppContext
from taskdeck.tasks.daily_engine import DailyChecklist
from taskdeck.tasks.task_engine import TaskEngine

from .fakes import LOCAL_TZ, FakeClock, InMemoryKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap code.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        strict_edit_title=False,
        console_enabled=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 9, 30, tzinfo=LOCAL_TZ))


@pytest.fixture()
def mem_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def tasks(mem_store: InMemoryKeyValueStore, clock: FakeClock) -> TaskEngine:
    return TaskEngine(mem_store, clock=clock)


@pytest.fixture()
def daily(mem_store: InMemoryKeyValueStore, clock: FakeClock) -> DailyChecklist:
    checklist = DailyChecklist(mem_store, clock=clock)
    checklist.initialize()
    return checklist


@pytest.fixture()
def ctx(settings: SimpleNamespace, clock: FakeClock) -> AppContext:
    """
    AppContext wired with a deterministic clock.

    NOTE: the SQLite store is real here because its round-trip is part of
    what we want to test.
    """
    return create_app_context(settings=settings, clock=clock)
