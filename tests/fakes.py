# tests/fakes.py

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from taskdeck.errors import PersistenceError

LOCAL_TZ = timezone(timedelta(hours=2))


class FakeClock:
    """
    Deterministic clock for engines.

    - Returns a fixed aware datetime until advanced
    """

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass(slots=True)
class InMemoryKeyValueStore:
    """
    Dict-backed KeyValueStore used by engine tests.

    Values are deep-copied on the way in and out so tests see the same
    isolation a serializing store gives. Set fail_writes to simulate a full
    or unavailable store, or fail_markers to fail only marker writes.
    """

    data: dict[str, Any] = field(default_factory=dict)
    fail_writes: bool = False
    fail_markers: bool = False
    saves: int = 0

    def load(self, key: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self.data.get(key, []))

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        if self.fail_writes:
            raise PersistenceError("store unavailable")
        self.data[key] = copy.deepcopy(items)
        self.saves += 1

    def get_marker(self, key: str) -> str | None:
        val = self.data.get(key)
        return val if isinstance(val, str) else None

    def set_marker(self, key: str, value: str) -> None:
        if self.fail_writes or self.fail_markers:
            raise PersistenceError("store unavailable")
        self.data[key] = value
