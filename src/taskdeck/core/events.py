# src/taskdeck/core/events.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    ADDED = "added"
    EDITED = "edited"
    TOGGLED = "toggled"
    DELETED = "deleted"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    source: str  # "tasks" | "daily"
    kind: ChangeKind
    item_id: str | int | None = None


ChangeListener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Synchronous observer list.

    Engines emit after a mutation has been persisted; listeners run in
    subscription order. A failing listener is logged and does not stop the
    others (the mutation is already durable at that point).
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed event=%s", event)

    def __len__(self) -> int:
        return len(self._listeners)
